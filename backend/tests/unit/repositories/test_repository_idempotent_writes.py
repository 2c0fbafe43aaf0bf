"""ON CONFLICT helpers used by ledgers, tokens, votes and events."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from furnibles.repositories.download_token import DownloadTokenRepository
from furnibles.repositories.payment_event import PaymentEventRepository
from furnibles.repositories.rating import ProductRatingRepository
from furnibles.repositories.transaction import TransactionRepository
from tests.factories.order import order_with_items
from tests.factories.product import ProductFactory
from tests.factories.user import BuyerFactory


@pytest.fixture()
def order(session):
    return order_with_items(BuyerFactory(), [ProductFactory()])


class TestInsertIgnore:
    def test_payment_event_claim_once(self, session, order):
        repo = PaymentEventRepository()

        assert repo.claim("evt_1", "payment.succeeded", order.id) is True
        assert repo.claim("evt_1", "payment.succeeded", order.id) is False
        assert repo.claim("evt_2", "payment.failed") is True

    def test_ledger_row_per_order_product_type(self, session, order):
        repo = TransactionRepository()
        item = order.items[0]
        row = dict(
            order_id=order.id,
            product_id=item.product_id,
            seller_id=item.seller_id,
            amount=Decimal("135.00"),
            currency="USD",
        )

        assert repo.record(type="SALE", **row) is True
        assert repo.record(type="SALE", **row) is False
        assert repo.record(type="REFUND", **row) is True
        assert [t.type for t in repo.list_for_order(order.id)] == ["SALE", "REFUND"]
        assert len(repo.list_for_order(order.id, type="SALE")) == 1

    def test_one_download_token_per_order_product(self, session, order):
        repo = DownloadTokenRepository()
        kwargs = dict(
            order_id=order.id,
            product_id=order.items[0].product_id,
            buyer_id=order.buyer_id,
            download_limit=5,
            expires_at=datetime.now(UTC) + timedelta(days=30),
        )

        assert repo.issue_if_absent(token="tok-a", **kwargs) is True
        assert repo.issue_if_absent(token="tok-b", **kwargs) is False
        assert repo.get_by_token("tok-a") is not None
        assert repo.get_by_token("tok-b") is None


class TestAggregateStore:
    def test_store_creates_then_overwrites(self, session):
        product = ProductFactory()
        repo = ProductRatingRepository()

        repo.store(
            product.id, {"total_reviews": 1, "average_rating": Decimal("5.00"), "rating_5": 1}
        )
        row = repo.store(product.id, {"total_reviews": 2, "average_rating": Decimal("4.50")})

        assert row.total_reviews == 2
        assert row.average_rating == Decimal("4.50")
        assert row.histogram == {1: 0, 2: 0, 3: 0, 4: 0, 5: 1}
