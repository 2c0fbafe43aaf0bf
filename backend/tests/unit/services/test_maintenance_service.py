"""Housekeeping jobs."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from furnibles.services._shared.ports import InMemoryBlacklistStore
from furnibles.services.maintenance.service import MaintenanceReport, MaintenanceService
from furnibles.services.payments.service import PaymentEventIn, PaymentService
from tests.factories.order import order_with_items
from tests.factories.product import ProductFactory
from tests.factories.user import BuyerFactory


def test_run_all_reports_each_job(session, freeze_time):
    store = InMemoryBlacklistStore()
    buyer = BuyerFactory()
    with freeze_time("2024-01-01 08:00:00"):
        store.add(token="old", user_id=None, expires_at=datetime.now(UTC) + timedelta(minutes=5))
        store.add(token="live", user_id=None, expires_at=datetime.now(UTC) + timedelta(days=90))
        order_with_items(buyer, [ProductFactory()])  # stale once an hour has passed
        paid = order_with_items(buyer, [ProductFactory()])
        PaymentService().handle_event(
            PaymentEventIn(event_id="evt_m", type="payment.succeeded", order_id=paid.id)
        )

    with freeze_time("2024-02-15 08:00:00"):
        report = MaintenanceService(blacklist_store=store).run_all()

    assert report == MaintenanceReport(
        purged_blacklist_entries=1,
        cancelled_orders=1,
        deactivated_downloads=1,
    )
    assert list(store.entries) == ["live"]


def test_jobs_are_noops_on_clean_state(session):
    svc = MaintenanceService(blacklist_store=InMemoryBlacklistStore())

    assert svc.purge_blacklist() == 0
    assert svc.cancel_stale_orders() == 0
    assert svc.expire_downloads() == 0
