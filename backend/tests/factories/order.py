"""Factory Boy helpers for orders placed outside the checkout flow."""

from __future__ import annotations

from decimal import Decimal

import factory

from furnibles.models.base import utcnow
from furnibles.models.order import Order, OrderItem
from furnibles.models.product import Product
from furnibles.models.user import User
from furnibles.services._shared.money import order_totals
from tests.factories import BaseFactory, SQLAlchemySession
from tests.factories.user import BuyerFactory

FEE_RATE = Decimal("0.10")


class OrderFactory(BaseFactory):
    """Order without items; prefer :func:`order_with_items` for realistic data."""

    class Meta:
        model = Order

    id = None
    order_number = factory.Sequence(lambda n: f"ORD-20240101-{n + 1:03d}")
    buyer_id = factory.LazyFunction(lambda: BuyerFactory().id)
    buyer_email = factory.Sequence(lambda n: f"buyer{n}@example.com")
    status = "PENDING"
    subtotal = Decimal("0.00")
    platform_fee_rate = FEE_RATE
    platform_fee = Decimal("0.00")
    total_amount = Decimal("0.00")
    seller_amount = Decimal("0.00")
    currency = "USD"


def order_with_items(
    buyer: User,
    products: list[Product],
    *,
    status: str = "PENDING",
    **overrides,
) -> Order:
    """
    Persist an order of ``buyer`` containing one line per product.

    Amounts follow the same fee split as checkout. A ``COMPLETED`` order gets
    ``paid_at``/``completed_at`` stamped.
    """
    subtotal = sum((p.price for p in products), Decimal("0"))
    values = dict(order_totals(subtotal, FEE_RATE))
    if status == "COMPLETED":
        now = utcnow()
        values.update(paid_at=now, completed_at=now, payment_status="succeeded")
    values.update(overrides)
    order = OrderFactory(buyer_id=buyer.id, buyer_email=buyer.email, status=status, **values)
    order.items = [
        OrderItem(
            product_id=p.id,
            seller_id=p.seller_id,
            product_title=p.title,
            price=p.price,
            quantity=1,
        )
        for p in products
    ]
    SQLAlchemySession.get().commit()
    return order
