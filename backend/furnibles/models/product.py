"""Product listing model (a downloadable furniture plan)."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, Enum, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from furnibles.core.extensions import db

from .base import Money, PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .user import User

PRODUCT_STATUSES = ("DRAFT", "PENDING", "APPROVED", "REJECTED")
ProductStatus = Enum(*PRODUCT_STATUSES, name="product_status")


class Product(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    A plan offered by a seller.

    Only the fields the order and review flows read are modelled here;
    catalogue presentation data lives with the storefront.
    """

    __tablename__ = "products"

    seller_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(220), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    status: Mapped[str] = mapped_column(ProductStatus, nullable=False, server_default="DRAFT")
    file_key: Mapped[str | None] = mapped_column(String(255))

    __table_args__ = (
        UniqueConstraint("slug", name="uq_products_slug"),
        CheckConstraint("price >= 0", name="price_non_negative"),
        Index("ix_products_seller_id", "seller_id"),
    )

    seller: Mapped[User] = relationship("User", lazy="joined")

    @property
    def is_purchasable(self) -> bool:
        return self.status == "APPROVED"
