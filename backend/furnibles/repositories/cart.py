"""Cart line repository."""

from __future__ import annotations

from typing import cast

from sqlalchemy import and_, delete, func, select

from furnibles.models.cart import CartItem
from furnibles.repositories.base import BaseRepository


class CartItemRepository(BaseRepository[CartItem]):
    """
    Persistence-only repository for :class:`CartItem`.

    Unique key: ``(user_id, product_id)``.
    """

    model = CartItem

    def list_for_user(self, user_id: int) -> list[CartItem]:
        stmt = (
            select(CartItem)
            .where(CartItem.user_id == user_id)
            .order_by(CartItem.created_at.asc(), CartItem.id.asc())
        )
        return list(self.session.execute(stmt).scalars().unique().all())

    def get_for_user_product(self, user_id: int, product_id: int) -> CartItem | None:
        stmt = select(CartItem).where(
            and_(CartItem.user_id == user_id, CartItem.product_id == product_id)
        )
        return cast(CartItem | None, self.session.execute(stmt).scalars().first())

    def get_for_user(self, user_id: int, item_id: int) -> CartItem | None:
        stmt = select(CartItem).where(and_(CartItem.id == item_id, CartItem.user_id == user_id))
        return cast(CartItem | None, self.session.execute(stmt).scalars().first())

    def count_for_user(self, user_id: int) -> int:
        stmt = select(func.count()).select_from(CartItem).where(CartItem.user_id == user_id)
        return int(self.session.execute(stmt).scalar_one())

    def clear_for_user(self, user_id: int) -> int:
        """Delete every line of ``user_id``'s cart; return the number removed."""
        result = self.session.execute(
            delete(CartItem)
            .where(CartItem.user_id == user_id)
            .execution_options(synchronize_session="fetch")
        )
        return int(result.rowcount or 0)
