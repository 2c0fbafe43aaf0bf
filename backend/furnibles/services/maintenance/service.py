# furnibles/services/maintenance/service.py
"""Periodic housekeeping jobs, run from the CLI or a scheduler."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from furnibles.services._shared.base import BaseService, ServiceContext
from furnibles.services._shared.config import MarketplaceConfig
from furnibles.services._shared.ports import TokenBlacklistStore
from furnibles.services.downloads.service import DownloadService
from furnibles.services.orders.service import OrderService

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MaintenanceReport:
    purged_blacklist_entries: int
    cancelled_orders: int
    deactivated_downloads: int


class MaintenanceService(BaseService):
    """
    Housekeeping over the revocation list, unpaid orders and download tokens.

    Each job runs in its own transaction, so one failing job does not undo
    the others.
    """

    def __init__(
        self,
        *,
        blacklist_store: TokenBlacklistStore,
        cfg: MarketplaceConfig | None = None,
    ) -> None:
        super().__init__(ctx=ServiceContext(role="ADMIN"))
        self.blacklist_store = blacklist_store
        self.cfg = cfg or MarketplaceConfig()

    def purge_blacklist(self) -> int:
        count = self.blacklist_store.purge_expired(now=datetime.now(UTC))
        log.info("Expired blacklist entries purged", extra={"count": count})
        return count

    def cancel_stale_orders(self) -> int:
        return OrderService(ctx=self.ctx, cfg=self.cfg).cancel_stale_orders()

    def expire_downloads(self) -> int:
        return DownloadService(ctx=self.ctx).deactivate_expired()

    def run_all(self) -> MaintenanceReport:
        return MaintenanceReport(
            purged_blacklist_entries=self.purge_blacklist(),
            cancelled_orders=self.cancel_stale_orders(),
            deactivated_downloads=self.expire_downloads(),
        )
