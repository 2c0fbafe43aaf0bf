# furnibles/services/orders/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from furnibles.models.order import Order


@dataclass(frozen=True, slots=True)
class OrderItemOut:
    product_id: int
    seller_id: int
    product_title: str
    price: Decimal
    quantity: int


@dataclass(frozen=True, slots=True)
class OrderOut:
    """
    Read model of an order.

    Amount invariants: ``total_amount == subtotal + platform_fee`` and
    ``seller_amount == subtotal - platform_fee``.
    """

    id: int
    order_number: str
    buyer_id: int
    buyer_email: str
    status: str
    subtotal: Decimal
    platform_fee_rate: Decimal
    platform_fee: Decimal
    total_amount: Decimal
    seller_amount: Decimal
    currency: str
    payment_status: str | None
    created_at: datetime
    paid_at: datetime | None
    completed_at: datetime | None
    cancelled_at: datetime | None
    refunded_at: datetime | None
    items: list[OrderItemOut]


def to_order_out(order: Order) -> OrderOut:
    return OrderOut(
        id=order.id,
        order_number=order.order_number,
        buyer_id=order.buyer_id,
        buyer_email=order.buyer_email,
        status=order.status,
        subtotal=order.subtotal,
        platform_fee_rate=order.platform_fee_rate,
        platform_fee=order.platform_fee,
        total_amount=order.total_amount,
        seller_amount=order.seller_amount,
        currency=order.currency,
        payment_status=order.payment_status,
        created_at=order.created_at,
        paid_at=order.paid_at,
        completed_at=order.completed_at,
        cancelled_at=order.cancelled_at,
        refunded_at=order.refunded_at,
        items=[
            OrderItemOut(
                product_id=item.product_id,
                seller_id=item.seller_id,
                product_title=item.product_title,
                price=item.price,
                quantity=item.quantity,
            )
            for item in order.items
        ],
    )
