"""Ledger entries produced by order settlement and refunds."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from furnibles.core.extensions import db

from .base import Money, PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .order import Order

TRANSACTION_TYPES = ("SALE", "PLATFORM_FEE", "REFUND")
TRANSACTION_STATUSES = ("PENDING", "COMPLETED", "FAILED", "CANCELLED")
TransactionType = Enum(*TRANSACTION_TYPES, name="transaction_type")
TransactionStatus = Enum(*TRANSACTION_STATUSES, name="transaction_status")


class Transaction(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    One money movement tied to an order line.

    ``SALE`` carries the seller's net, ``PLATFORM_FEE`` the marketplace cut;
    both rows of a line always sum to the line subtotal. The
    ``(order_id, product_id, type)`` key makes settlement replay-safe.
    """

    __tablename__ = "transactions"

    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), nullable=False
    )
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="RESTRICT"), nullable=False
    )
    seller_id: Mapped[int | None] = mapped_column(ForeignKey("users.id", ondelete="SET NULL"))
    type: Mapped[str] = mapped_column(TransactionType, nullable=False)
    status: Mapped[str] = mapped_column(TransactionStatus, nullable=False, default="PENDING")
    amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")
    description: Mapped[str | None] = mapped_column(String(255))
    processed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        UniqueConstraint(
            "order_id", "product_id", "type", name="uq_transactions_order_product_type"
        ),
        Index("ix_transactions_seller_id", "seller_id"),
    )

    order: Mapped[Order] = relationship("Order", back_populates="transactions")
