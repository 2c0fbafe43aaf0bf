"""Revoked session tokens (stateful negative list for stateless JWTs)."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from furnibles.core.extensions import db

from .base import PKMixin, ReprMixin, as_aware, utcnow


class BlacklistedToken(PKMixin, ReprMixin, db.Model):
    """
    A token value that must be rejected until ``expires_at``.

    Rows are keyed by the raw token string (unique) so a second logout with
    the same token is a no-op. Once the natural expiry has passed the row is
    irrelevant and is deleted on the next lookup or by maintenance.
    """

    __tablename__ = "blacklisted_tokens"

    token: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=True
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (
        UniqueConstraint("token", name="uq_blacklisted_tokens_token"),
        Index("ix_blacklisted_tokens_expires_at", "expires_at"),
    )

    def is_expired(self, now: datetime | None = None) -> bool:
        """Return ``True`` once the token's natural expiry has passed."""
        return as_aware(self.expires_at) <= (now or utcnow())
