"""Processed payment-provider webhook events."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from furnibles.core.extensions import db

from .base import PKMixin, ReprMixin, utcnow


class PaymentEvent(PKMixin, ReprMixin, db.Model):
    """Provider event id seen once; replays are acknowledged and skipped."""

    __tablename__ = "payment_events"

    event_id: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(64), nullable=False)
    order_id: Mapped[int | None] = mapped_column(ForeignKey("orders.id", ondelete="SET NULL"))
    processed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (UniqueConstraint("event_id", name="uq_payment_events_event_id"),)
