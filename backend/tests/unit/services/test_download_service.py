"""Download token listing, redemption limits and expiry."""

from __future__ import annotations

import pytest
from sqlalchemy import select

from furnibles.models.download_token import DownloadToken
from furnibles.services._shared.config import MarketplaceConfig
from furnibles.services._shared.errors import (
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from furnibles.services.downloads.service import DownloadService
from furnibles.services.payments.service import PaymentEventIn, PaymentService
from tests.factories.order import order_with_items
from tests.factories.product import ProductFactory
from tests.factories.user import BuyerFactory
from tests.helpers.auth import context_for


@pytest.fixture()
def buyer(session):
    return BuyerFactory()


@pytest.fixture()
def paid_order(session, buyer, freeze_time):
    order = order_with_items(buyer, [ProductFactory()])
    cfg = MarketplaceConfig(download_limit=2)
    with freeze_time("2024-01-01 12:00:00"):
        PaymentService(cfg=cfg).handle_event(
            PaymentEventIn(event_id="evt_dl", type="payment.succeeded", order_id=order.id)
        )
    return order


def _token(session, order_id: int) -> str:
    stmt = select(DownloadToken.token).where(DownloadToken.order_id == order_id)
    return session.execute(stmt).scalar_one()


class TestDownloadService:
    def test_lists_tokens_of_completed_order(self, session, buyer, paid_order, freeze_time):
        with freeze_time("2024-01-02"):
            tokens = DownloadService(ctx=context_for(buyer)).list_order_downloads(paid_order.id)

        assert len(tokens) == 1
        assert tokens[0].remaining == 2
        assert tokens[0].is_usable is True

    def test_other_buyers_cannot_list(self, session, paid_order):
        with pytest.raises(NotFoundError):
            DownloadService(ctx=context_for(BuyerFactory())).list_order_downloads(paid_order.id)

    def test_pending_order_has_no_downloads(self, session, buyer):
        order = order_with_items(buyer, [ProductFactory()])

        with pytest.raises(ValidationError, match="completed"):
            DownloadService(ctx=context_for(buyer)).list_order_downloads(order.id)

    def test_redeem_until_limit(self, session, buyer, paid_order, freeze_time):
        token = _token(session, paid_order.id)
        svc = DownloadService(ctx=context_for(buyer))

        with freeze_time("2024-01-05"):
            first = svc.redeem(token)
            second = svc.redeem(token)
            with pytest.raises(ValidationError, match="limit"):
                svc.redeem(token)

        assert (first.remaining, second.remaining) == (1, 0)
        assert first.file_key is not None

    def test_redeem_rejects_other_buyer(self, session, paid_order):
        token = _token(session, paid_order.id)

        with pytest.raises(AuthorizationError):
            DownloadService(ctx=context_for(BuyerFactory())).redeem(token)

    def test_redeem_after_expiry(self, session, buyer, paid_order, freeze_time):
        token = _token(session, paid_order.id)

        with freeze_time("2024-02-01"), pytest.raises(ValidationError, match="expired"):
            DownloadService(ctx=context_for(buyer)).redeem(token)

    def test_unknown_token(self, session, buyer):
        with pytest.raises(NotFoundError):
            DownloadService(ctx=context_for(buyer)).redeem("nope")

    def test_deactivate_expired(self, session, buyer, paid_order, freeze_time):
        with freeze_time("2024-01-15"):
            assert DownloadService().deactivate_expired() == 0
        with freeze_time("2024-02-15"):
            assert DownloadService().deactivate_expired() == 1

        with pytest.raises(ValidationError, match="no longer active"):
            DownloadService(ctx=context_for(buyer)).redeem(_token(session, paid_order.id))
