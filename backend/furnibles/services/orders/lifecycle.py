# furnibles/services/orders/lifecycle.py
"""Order state changes shared by the order API, the payment webhook and maintenance."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from furnibles.models.order import Order
from furnibles.services._shared.errors import ValidationError
from furnibles.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

log = logging.getLogger(__name__)

CANCELLABLE_STATUSES = frozenset({"PENDING", "PROCESSING"})
REFUNDABLE_STATUSES = frozenset({"PAID", "COMPLETED"})


def next_order_number(uow: SQLAlchemyUnitOfWork, now: datetime) -> str:
    """
    Return the next free ``ORD-YYYYMMDD-NNN`` number for the day of ``now``.

    ``NNN`` is the day's order count plus one, zero-padded to three digits
    (it widens naturally past 999).
    """
    day_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    seq = uow.orders.count_created_between(day_start, day_start + timedelta(days=1)) + 1
    prefix = f"ORD-{now:%Y%m%d}"
    number = f"{prefix}-{seq:03d}"
    while uow.orders.number_taken(number):
        seq += 1
        number = f"{prefix}-{seq:03d}"
    return number


def cancel(order: Order, now: datetime) -> None:
    """
    Cancel an unpaid order.

    :raises ValidationError: Unless the order is PENDING or PROCESSING.
    """
    if order.status not in CANCELLABLE_STATUSES:
        raise ValidationError(f"Order cannot be cancelled in status {order.status}")
    order.transition_to("CANCELLED")
    order.cancelled_at = now
    log.info("Order cancelled", extra={"order_id": order.id})


def refund(
    uow: SQLAlchemyUnitOfWork,
    order: Order,
    now: datetime,
    *,
    allowed: frozenset[str] = REFUNDABLE_STATUSES,
) -> None:
    """
    Refund a paid order: REFUNDED, downloads revoked, REFUND ledger rows.

    :raises ValidationError: If the order status is not in ``allowed``.
    """
    if order.status not in allowed:
        raise ValidationError("Only paid or completed orders can be refunded")
    order.transition_to("REFUNDED")
    order.refunded_at = now
    order.payment_status = "refunded"
    uow.orders.flush()

    revoked = uow.downloads.deactivate_for_order(order.id)
    for item in order.items:
        uow.transactions.record(
            order_id=order.id,
            product_id=item.product_id,
            seller_id=item.seller_id,
            type="REFUND",
            amount=item.line_total,
            currency=order.currency,
            description=f"Refund for order {order.order_number}",
            processed_at=now,
        )
    uow.session.expire(order, ["download_tokens", "transactions"])
    log.info("Order refunded", extra={"order_id": order.id, "count": revoked})
