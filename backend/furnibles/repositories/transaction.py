"""Ledger repository; settlement rows are written insert-or-ignore."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import select

from furnibles.models.transaction import Transaction
from furnibles.repositories.base import BaseRepository


class TransactionRepository(BaseRepository[Transaction]):
    model = Transaction

    def record(
        self,
        *,
        order_id: int,
        product_id: int,
        seller_id: int | None,
        type: str,
        amount: Decimal,
        currency: str,
        status: str = "COMPLETED",
        description: str | None = None,
        processed_at: datetime | None = None,
    ) -> bool:
        """Write one ledger row unless ``(order, product, type)`` already exists.

        :returns: ``True`` when the row was created by this call.
        """
        return self.insert_ignore(
            {
                "order_id": order_id,
                "product_id": product_id,
                "seller_id": seller_id,
                "type": type,
                "status": status,
                "amount": amount,
                "currency": currency,
                "description": description,
                "processed_at": processed_at,
            },
            conflict_on=("order_id", "product_id", "type"),
        )

    def list_for_order(self, order_id: int, *, type: str | None = None) -> list[Transaction]:
        stmt = select(Transaction).where(Transaction.order_id == order_id)
        if type:
            stmt = stmt.where(Transaction.type == type)
        stmt = stmt.order_by(Transaction.id.asc())
        return list(self.session.execute(stmt).scalars().all())
