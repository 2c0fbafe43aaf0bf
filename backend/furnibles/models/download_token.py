"""Capability tokens granting limited downloads of purchased files."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from furnibles.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin, as_aware, utcnow

if TYPE_CHECKING:
    from .order import Order
    from .product import Product


class DownloadToken(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    One token per purchased product per order.

    Usable while active, before ``expires_at`` and while
    ``download_count < download_limit``.
    """

    __tablename__ = "download_tokens"

    token: Mapped[str] = mapped_column(String(64), nullable=False)
    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), nullable=False
    )
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="RESTRICT"), nullable=False
    )
    buyer_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    download_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    download_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    last_download_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        UniqueConstraint("token", name="uq_download_tokens_token"),
        UniqueConstraint("order_id", "product_id", name="uq_download_tokens_order_product"),
        Index("ix_download_tokens_buyer_id", "buyer_id"),
    )

    order: Mapped[Order] = relationship("Order", back_populates="download_tokens")
    product: Mapped[Product] = relationship("Product", lazy="joined")

    def is_expired(self, now: datetime | None = None) -> bool:
        return as_aware(self.expires_at) <= (now or utcnow())

    @property
    def remaining(self) -> int:
        return max(0, self.download_limit - self.download_count)

    def is_usable(self, now: datetime | None = None) -> bool:
        return self.is_active and not self.is_expired(now) and self.remaining > 0
