# furnibles/services/downloads/service.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from furnibles.models.download_token import DownloadToken
from furnibles.services._shared.base import BaseService
from furnibles.services._shared.errors import AuthorizationError, NotFoundError, ValidationError

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DownloadTokenOut:
    token: str
    order_id: int
    product_id: int
    product_title: str
    download_limit: int
    download_count: int
    remaining: int
    expires_at: datetime
    is_active: bool
    is_usable: bool


@dataclass(frozen=True, slots=True)
class DownloadGrantOut:
    """Result of a redeemed download: where the file lives and what is left."""

    product_id: int
    file_key: str | None
    remaining: int
    expires_at: datetime


def _to_out(token: DownloadToken, now: datetime) -> DownloadTokenOut:
    return DownloadTokenOut(
        token=token.token,
        order_id=token.order_id,
        product_id=token.product_id,
        product_title=token.product.title,
        download_limit=token.download_limit,
        download_count=token.download_count,
        remaining=token.remaining,
        expires_at=token.expires_at,
        is_active=token.is_active,
        is_usable=token.is_usable(now),
    )


class DownloadService(BaseService):
    """Read and redeem the download tokens issued at fulfillment."""

    def list_order_downloads(self, order_id: int) -> list[DownloadTokenOut]:
        """
        Return the tokens of a COMPLETED order owned by the actor.

        :raises NotFoundError: If the order does not exist or is not the actor's.
        :raises ValidationError: If the order is not COMPLETED.
        """
        now = self.now_utc()
        with self.ro_uow() as uow:
            order = uow.orders.get(order_id)
            if order is None or order.buyer_id != self.ctx.actor_id:
                raise NotFoundError("Order", order_id)
            if order.status != "COMPLETED":
                raise ValidationError("Downloads are available once the order is completed")
            return [_to_out(t, now) for t in uow.downloads.list_for_order(order_id)]

    def redeem(self, token: str) -> DownloadGrantOut:
        """
        Consume one download of ``token``.

        :raises NotFoundError: If the token does not exist.
        :raises AuthorizationError: If the actor is not the buyer.
        :raises ValidationError: If the token is inactive, expired or exhausted.
        """
        now = self.now_utc()
        with self.rw_uow() as uow:
            entry = uow.downloads.get_by_token(token, for_update=True)
            if entry is None:
                raise NotFoundError("DownloadToken", token[:8])
            if entry.buyer_id != self.ctx.actor_id:
                raise AuthorizationError("This download belongs to another user")
            if not entry.is_active:
                raise ValidationError("Download link is no longer active")
            if entry.is_expired(now):
                raise ValidationError("Download link has expired")
            if entry.remaining <= 0:
                raise ValidationError("Download limit reached")

            entry.download_count += 1
            entry.last_download_at = now
            uow.downloads.flush()
            log.info(
                "Download redeemed",
                extra={"order_id": entry.order_id, "product_id": entry.product_id},
            )
            return DownloadGrantOut(
                product_id=entry.product_id,
                file_key=entry.product.file_key,
                remaining=entry.remaining,
                expires_at=entry.expires_at,
            )

    def deactivate_expired(self) -> int:
        with self.rw_uow() as uow:
            count = uow.downloads.deactivate_expired(self.now_utc())
        if count:
            log.info("Expired download tokens deactivated", extra={"count": count})
        return count

    @staticmethod
    def now_utc() -> datetime:
        return datetime.now(UTC)
