"""Cart management, checkout and order queries."""

from __future__ import annotations

import re
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from furnibles.models.cart import CartItem
from furnibles.services._shared.config import MarketplaceConfig
from furnibles.services._shared.errors import (
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from furnibles.services.cart.service import CartService
from furnibles.services.orders.service import OrderService
from tests.factories.order import order_with_items
from tests.factories.product import ProductFactory
from tests.factories.user import AdminFactory, BuyerFactory, SellerFactory
from tests.helpers.auth import context_for


def _cart_rows(session, user_id: int) -> int:
    stmt = select(func.count()).select_from(CartItem).where(CartItem.user_id == user_id)
    return session.execute(stmt).scalar_one()


# --------------------------------- Cart ----------------------------------- #
class TestCartService:
    def test_add_item_reports_fee_on_top(self, session):
        buyer = BuyerFactory()
        product = ProductFactory(price=Decimal("450.00"))

        cart = CartService(ctx=context_for(buyer)).add_item(product.id)

        assert cart.item_count == 1
        assert cart.subtotal == Decimal("450.00")
        assert cart.platform_fee == Decimal("45.00")
        assert cart.total == Decimal("495.00")
        assert cart.items[0].title == product.title

    def test_rejects_duplicates_and_own_products(self, session):
        buyer = BuyerFactory()
        product = ProductFactory()
        svc = CartService(ctx=context_for(buyer))
        svc.add_item(product.id)

        with pytest.raises(ValidationError, match="already in the cart"):
            svc.add_item(product.id)

        own = ProductFactory(seller=buyer)
        with pytest.raises(ValidationError, match="your own product"):
            svc.add_item(own.id)

    def test_rejects_unavailable_and_missing_products(self, session):
        svc = CartService(ctx=context_for(BuyerFactory()))

        with pytest.raises(ValidationError, match="not available"):
            svc.add_item(ProductFactory(status="DRAFT").id)
        with pytest.raises(NotFoundError):
            svc.add_item(999_999)

    def test_cart_size_is_capped(self, session):
        svc = CartService(
            ctx=context_for(BuyerFactory()), cfg=MarketplaceConfig(cart_max_items=2)
        )
        svc.add_item(ProductFactory().id)
        svc.add_item(ProductFactory().id)

        with pytest.raises(ValidationError, match="more than 2"):
            svc.add_item(ProductFactory().id)

    def test_only_buyers_have_a_cart(self, session):
        with pytest.raises(AuthorizationError):
            CartService(ctx=context_for(SellerFactory())).get_cart()

    def test_remove_and_clear(self, session):
        buyer = BuyerFactory()
        svc = CartService(ctx=context_for(buyer))
        cart = svc.add_item(ProductFactory().id)
        svc.add_item(ProductFactory().id)

        after = svc.remove_item(cart.items[0].id)
        assert after.item_count == 1

        svc.clear()
        assert _cart_rows(session, buyer.id) == 0

    def test_cannot_remove_someone_elses_line(self, session):
        owner = BuyerFactory()
        line = CartService(ctx=context_for(owner)).add_item(ProductFactory().id).items[0]

        with pytest.raises(NotFoundError):
            CartService(ctx=context_for(BuyerFactory())).remove_item(line.id)


# ------------------------------- Checkout --------------------------------- #
class TestCheckout:
    def test_creates_pending_order_and_empties_cart(self, session):
        buyer = BuyerFactory()
        cart = CartService(ctx=context_for(buyer))
        cart.add_item(ProductFactory(price=Decimal("300.00")).id)
        cart.add_item(ProductFactory(price=Decimal("150.00")).id)

        order = OrderService(ctx=context_for(buyer)).checkout()

        assert order.status == "PENDING"
        assert re.fullmatch(r"ORD-\d{8}-\d{3}", order.order_number)
        assert order.buyer_email == buyer.email
        assert order.subtotal == Decimal("450.00")
        assert order.platform_fee == Decimal("45.00")
        assert order.total_amount == Decimal("495.00")
        assert order.seller_amount == Decimal("405.00")
        assert len(order.items) == 2
        assert _cart_rows(session, buyer.id) == 0

    def test_order_numbers_are_sequential_per_day(self, session, freeze_time):
        numbers = []
        with freeze_time("2024-03-05 09:00:00"):
            for _ in range(2):
                buyer = BuyerFactory()
                CartService(ctx=context_for(buyer)).add_item(ProductFactory().id)
                numbers.append(OrderService(ctx=context_for(buyer)).checkout().order_number)

        assert numbers == ["ORD-20240305-001", "ORD-20240305-002"]

    def test_empty_cart_is_rejected(self, session):
        with pytest.raises(ValidationError, match="empty"):
            OrderService(ctx=context_for(BuyerFactory())).checkout()

    def test_unpurchasable_lines_are_skipped(self, session):
        buyer = BuyerFactory()
        cart = CartService(ctx=context_for(buyer))
        keep = ProductFactory(price=Decimal("100.00"))
        drop = ProductFactory(price=Decimal("50.00"))
        cart.add_item(keep.id)
        cart.add_item(drop.id)
        drop.status = "REJECTED"
        session.commit()

        order = OrderService(ctx=context_for(buyer)).checkout()

        assert [i.product_id for i in order.items] == [keep.id]
        assert order.subtotal == Decimal("100.00")


# ------------------------------ Order queries ----------------------------- #
class TestOrderQueries:
    def test_visibility(self, session):
        buyer = BuyerFactory()
        product = ProductFactory()
        order = order_with_items(buyer, [product])

        assert OrderService(ctx=context_for(buyer)).get_order(order.id).id == order.id
        seller_view = OrderService(ctx=context_for(product.seller)).get_order(order.id)
        assert seller_view.id == order.id
        assert OrderService(ctx=context_for(AdminFactory())).get_order(order.id)
        with pytest.raises(NotFoundError):
            OrderService(ctx=context_for(BuyerFactory())).get_order(order.id)

    def test_buyer_listing_filters_by_status(self, session):
        buyer = BuyerFactory()
        order_with_items(buyer, [ProductFactory()])
        order_with_items(buyer, [ProductFactory()], status="COMPLETED")
        order_with_items(BuyerFactory(), [ProductFactory()])

        svc = OrderService(ctx=context_for(buyer))
        items, total = svc.list_buyer_orders()
        assert total == 2
        completed, n = svc.list_buyer_orders(status="COMPLETED")
        assert n == 1
        assert completed[0].status == "COMPLETED"

    def test_seller_sales(self, session):
        product = ProductFactory()
        order_with_items(BuyerFactory(), [product, ProductFactory()])

        items, total = OrderService(ctx=context_for(product.seller)).list_seller_sales()

        assert total == 1
        with pytest.raises(AuthorizationError):
            OrderService(ctx=context_for(BuyerFactory())).list_seller_sales()


# ------------------------------ Order changes ----------------------------- #
class TestOrderLifecycle:
    def test_buyer_cancels_pending_order(self, session):
        buyer = BuyerFactory()
        order = order_with_items(buyer, [ProductFactory()])

        out = OrderService(ctx=context_for(buyer)).cancel_order(order.id)

        assert out.status == "CANCELLED"
        assert out.cancelled_at is not None

    def test_completed_order_cannot_be_cancelled(self, session):
        buyer = BuyerFactory()
        order = order_with_items(buyer, [ProductFactory()], status="COMPLETED")

        with pytest.raises(ValidationError):
            OrderService(ctx=context_for(buyer)).cancel_order(order.id)

    def test_admin_refund_requires_paid_order(self, session):
        buyer = BuyerFactory()
        pending = order_with_items(buyer, [ProductFactory()])
        completed = order_with_items(buyer, [ProductFactory()], status="COMPLETED")
        admin_svc = OrderService(ctx=context_for(AdminFactory()))

        with pytest.raises(ValidationError):
            admin_svc.refund_order(pending.id)
        out = admin_svc.refund_order(completed.id)

        assert out.status == "REFUNDED"
        assert out.payment_status == "refunded"
        with pytest.raises(AuthorizationError):
            OrderService(ctx=context_for(buyer)).refund_order(completed.id)

    def test_cancel_stale_orders(self, session, freeze_time):
        buyer = BuyerFactory()
        with freeze_time("2024-01-01 08:00:00"):
            stale = order_with_items(buyer, [ProductFactory()])
        with freeze_time("2024-01-01 09:30:00"):
            fresh = order_with_items(buyer, [ProductFactory()])
            cancelled = OrderService(ctx=context_for(AdminFactory())).cancel_stale_orders()

        assert cancelled == 1
        session.expire_all()
        assert stale.status == "CANCELLED"
        assert fresh.status == "PENDING"
