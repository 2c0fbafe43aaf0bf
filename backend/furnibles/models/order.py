"""Order and order-item models with the order lifecycle rules."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from furnibles.core.extensions import db

from .base import Money, PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .download_token import DownloadToken
    from .transaction import Transaction

# --- Domain Enum ---
ORDER_STATUSES = (
    "PENDING",
    "PROCESSING",
    "PAID",
    "COMPLETED",
    "CANCELLED",
    "REFUNDED",
    "DISPUTED",
)
OrderStatus = Enum(*ORDER_STATUSES, name="order_status")

# Allowed lifecycle moves. Refunds and disputes stay reachable after
# completion because the charge still exists with the provider.
ORDER_TRANSITIONS: dict[str, frozenset[str]] = {
    "PENDING": frozenset({"PROCESSING", "CANCELLED", "REFUNDED", "DISPUTED"}),
    "PROCESSING": frozenset({"PAID", "CANCELLED", "REFUNDED", "DISPUTED"}),
    "PAID": frozenset({"COMPLETED", "CANCELLED", "REFUNDED", "DISPUTED"}),
    "COMPLETED": frozenset({"REFUNDED", "DISPUTED"}),
    "DISPUTED": frozenset({"REFUNDED"}),
    "CANCELLED": frozenset(),
    "REFUNDED": frozenset(),
}


class Order(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    A checkout of one buyer's cart.

    Amount invariants (enforced on creation by the order service):

    * ``platform_fee == round(subtotal * platform_fee_rate, 2)``
    * ``total_amount == subtotal + platform_fee``
    * ``seller_amount == subtotal - platform_fee``
    """

    __tablename__ = "orders"

    order_number: Mapped[str] = mapped_column(String(32), nullable=False)
    buyer_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    buyer_email: Mapped[str] = mapped_column(String(254), nullable=False)
    status: Mapped[str] = mapped_column(OrderStatus, nullable=False, default="PENDING")

    subtotal: Mapped[Decimal] = mapped_column(Money, nullable=False)
    platform_fee_rate: Mapped[Decimal] = mapped_column(Numeric(5, 4), nullable=False)
    platform_fee: Mapped[Decimal] = mapped_column(Money, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    seller_amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="USD")

    payment_intent_id: Mapped[str | None] = mapped_column(String(255))
    payment_status: Mapped[str | None] = mapped_column(String(32))
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    refunded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        UniqueConstraint("order_number", name="uq_orders_order_number"),
        Index("ix_orders_buyer_id", "buyer_id"),
        Index("ix_orders_status_created_at", "status", "created_at"),
        Index("ix_orders_payment_intent_id", "payment_intent_id"),
    )

    items: Mapped[list[OrderItem]] = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OrderItem.id",
    )
    download_tokens: Mapped[list[DownloadToken]] = relationship(
        "DownloadToken", back_populates="order", lazy="selectin", order_by="DownloadToken.id"
    )
    transactions: Mapped[list[Transaction]] = relationship(
        "Transaction", back_populates="order", lazy="selectin", order_by="Transaction.id"
    )

    # -------------------- Lifecycle --------------------
    def can_transition_to(self, target: str) -> bool:
        return target in ORDER_TRANSITIONS.get(self.status, frozenset())

    def transition_to(self, target: str) -> None:
        """
        Move the order to ``target`` if the lifecycle allows it.

        :raises ValueError: On an illegal transition.
        """
        if not self.can_transition_to(target):
            raise ValueError(f"Illegal order transition {self.status} -> {target}")
        self.status = target

    @property
    def product_ids(self) -> list[int]:
        """Distinct purchased product ids, in item order."""
        seen: dict[int, None] = {}
        for item in self.items:
            seen.setdefault(item.product_id, None)
        return list(seen)

    def contains_product(self, product_id: int) -> bool:
        return any(item.product_id == product_id for item in self.items)

    def seller_ids(self) -> set[int]:
        return {item.seller_id for item in self.items}


class OrderItem(PKMixin, ReprMixin, db.Model):
    """Immutable snapshot of one purchased product at checkout time."""

    __tablename__ = "order_items"

    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), nullable=False
    )
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="RESTRICT"), nullable=False
    )
    seller_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    product_title: Mapped[str] = mapped_column(String(200), nullable=False)
    price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __table_args__ = (
        UniqueConstraint("order_id", "product_id", name="uq_order_items_order_product"),
        CheckConstraint("quantity > 0", name="quantity_positive"),
        Index("ix_order_items_seller_id", "seller_id"),
    )

    order: Mapped[Order] = relationship("Order", back_populates="items")

    @property
    def line_total(self) -> Decimal:
        return Decimal(self.price) * self.quantity
