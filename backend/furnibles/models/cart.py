"""Shopping cart lines."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from furnibles.core.extensions import db

from .base import Money, PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .product import Product


class CartItem(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """One product in a buyer's cart with the price seen when it was added."""

    __tablename__ = "cart_items"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), nullable=False
    )
    price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __table_args__ = (UniqueConstraint("user_id", "product_id", name="uq_cart_items_user_product"),)

    product: Mapped[Product] = relationship("Product", lazy="joined")
