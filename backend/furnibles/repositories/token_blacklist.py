"""Repository for revoked session tokens."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import delete, select

from furnibles.models.token_blacklist import BlacklistedToken
from furnibles.repositories.base import BaseRepository


class TokenBlacklistRepository(BaseRepository[BlacklistedToken]):
    """Insert-or-ignore writes and exact-token lookups on ``blacklisted_tokens``."""

    model = BlacklistedToken

    def get_by_token(self, token: str) -> BlacklistedToken | None:
        stmt = select(BlacklistedToken).where(BlacklistedToken.token == token)
        return cast(BlacklistedToken | None, self.session.execute(stmt).scalars().first())

    def add_if_absent(self, *, token: str, user_id: int | None, expires_at: datetime) -> bool:
        """Blacklist ``token`` unless it already is.

        :returns: ``True`` when a row was inserted.
        """
        return self.insert_ignore(
            {"token": token, "user_id": user_id, "expires_at": expires_at},
            conflict_on=("token",),
        )

    def delete_entry(self, entry: BlacklistedToken) -> None:
        self.session.delete(entry)
        self.flush()

    def purge_expired(self, now: datetime) -> int:
        """Bulk-delete entries whose expiry has passed; return the row count."""
        result = self.session.execute(
            delete(BlacklistedToken).where(BlacklistedToken.expires_at <= now)
        )
        return int(result.rowcount or 0)
