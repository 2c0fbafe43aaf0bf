"""Download token repository."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import and_, select, update

from furnibles.models.download_token import DownloadToken
from furnibles.repositories.base import BaseRepository


class DownloadTokenRepository(BaseRepository[DownloadToken]):
    """
    Persistence-only repository for :class:`DownloadToken`.

    Unique keys: ``token`` and ``(order_id, product_id)``.
    """

    model = DownloadToken

    def get_by_token(self, token: str, *, for_update: bool = False) -> DownloadToken | None:
        stmt = select(DownloadToken).where(DownloadToken.token == token)
        if for_update:
            stmt = stmt.with_for_update(of=DownloadToken)
        return cast(DownloadToken | None, self.session.execute(stmt).scalars().first())

    def get_for_order_product(self, order_id: int, product_id: int) -> DownloadToken | None:
        stmt = select(DownloadToken).where(
            and_(DownloadToken.order_id == order_id, DownloadToken.product_id == product_id)
        )
        return cast(DownloadToken | None, self.session.execute(stmt).scalars().first())

    def issue_if_absent(
        self,
        *,
        token: str,
        order_id: int,
        product_id: int,
        buyer_id: int,
        download_limit: int,
        expires_at: datetime,
    ) -> bool:
        """Create the token of ``(order_id, product_id)`` unless one exists."""
        return self.insert_ignore(
            {
                "token": token,
                "order_id": order_id,
                "product_id": product_id,
                "buyer_id": buyer_id,
                "download_limit": download_limit,
                "download_count": 0,
                "expires_at": expires_at,
                "is_active": True,
            },
            conflict_on=("order_id", "product_id"),
        )

    def list_for_order(self, order_id: int) -> list[DownloadToken]:
        stmt = (
            select(DownloadToken)
            .where(DownloadToken.order_id == order_id)
            .order_by(DownloadToken.id.asc())
        )
        return list(self.session.execute(stmt).scalars().unique().all())

    def deactivate_for_order(self, order_id: int) -> int:
        result = self.session.execute(
            update(DownloadToken)
            .where(and_(DownloadToken.order_id == order_id, DownloadToken.is_active.is_(True)))
            .values(is_active=False)
            .execution_options(synchronize_session="fetch")
        )
        return int(result.rowcount or 0)

    def deactivate_expired(self, now: datetime) -> int:
        """Flip ``is_active`` off for active tokens past ``expires_at``."""
        result = self.session.execute(
            update(DownloadToken)
            .where(and_(DownloadToken.is_active.is_(True), DownloadToken.expires_at <= now))
            .values(is_active=False)
            .execution_options(synchronize_session="fetch")
        )
        return int(result.rowcount or 0)
