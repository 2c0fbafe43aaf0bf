"""Order repository: lookups, buyer/seller listings and maintenance queries."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, cast

from sqlalchemy import Select, and_, func, select
from sqlalchemy.orm import InstrumentedAttribute

from furnibles.models.order import Order, OrderItem
from furnibles.repositories.base import BaseRepository, Page, Pagination, apply_sorting, paginate_select


class OrderRepository(BaseRepository[Order]):
    """
    Persistence-only repository for :class:`Order`.

    Items, tokens and transactions are loaded through the model's
    ``selectin`` relationships.
    """

    model = Order

    def _sortable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]]:
        return {
            "id": Order.id,
            "created_at": Order.created_at,
            "total_amount": Order.total_amount,
            "status": Order.status,
        }

    def _filterable_fields(self) -> Mapping[str, InstrumentedAttribute[Any]] | None:
        return {
            "buyer_id": Order.buyer_id,
            "status": Order.status,
        }

    # ---------------------------- Lookups ----------------------------
    def get_by_number(self, order_number: str) -> Order | None:
        stmt = select(Order).where(Order.order_number == order_number)
        return cast(Order | None, self.session.execute(stmt).scalars().first())

    def get_by_payment_intent(
        self, payment_intent_id: str, *, for_update: bool = False
    ) -> Order | None:
        stmt = select(Order).where(Order.payment_intent_id == payment_intent_id)
        if for_update:
            stmt = stmt.with_for_update(of=Order)
        return cast(Order | None, self.session.execute(stmt).scalars().first())

    def count_created_between(self, start: datetime, end: datetime) -> int:
        """Number of orders created in ``[start, end)``; drives order numbering."""
        stmt = (
            select(func.count())
            .select_from(Order)
            .where(and_(Order.created_at >= start, Order.created_at < end))
        )
        return int(self.session.execute(stmt).scalar_one())

    def number_taken(self, order_number: str) -> bool:
        stmt = select(Order.id).where(Order.order_number == order_number)
        return self.session.execute(stmt).first() is not None

    # ---------------------------- Listings ----------------------------
    def paginate_for_buyer(
        self, buyer_id: int, pagination: Pagination, *, status: str | None = None
    ) -> Page[Order]:
        filters: dict[str, Any] = {"buyer_id": buyer_id}
        if status:
            filters["status"] = status
        if not pagination.sort:
            pagination.sort = ["-created_at"]
        return self.paginate(pagination, filters=filters)

    def paginate_for_seller(
        self, seller_id: int, pagination: Pagination, *, status: str | None = None
    ) -> Page[Order]:
        """Orders containing at least one product sold by ``seller_id``."""
        stmt: Select[Any] = select(Order).where(
            Order.id.in_(select(OrderItem.order_id).where(OrderItem.seller_id == seller_id))
        )
        if status:
            stmt = stmt.where(Order.status == status)
        stmt = apply_sorting(
            stmt,
            self._sortable_fields(),
            pagination.sort or ["-created_at"],
            pk_attr=self._pk_attr(),
        )
        items, total = paginate_select(
            self.session, stmt, page=pagination.page, limit=pagination.limit
        )
        return Page(items=items, total=total, page=pagination.page, limit=pagination.limit)

    # ---------------------------- Maintenance ----------------------------
    def list_stale_pending(self, created_before: datetime) -> list[Order]:
        stmt = (
            select(Order)
            .where(and_(Order.status == "PENDING", Order.created_at < created_before))
            .order_by(Order.id.asc())
        )
        return list(self.session.execute(stmt).scalars().all())
