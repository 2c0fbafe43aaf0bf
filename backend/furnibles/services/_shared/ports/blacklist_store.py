from __future__ import annotations

from datetime import datetime
from enum import Enum, auto
from typing import Protocol


class BlacklistStatus(Enum):
    """Outcome of looking a token up in the blacklist."""

    ABSENT = auto()
    REVOKED = auto()
    EXPIRED = auto()  # entry was present but past its expiry; it has been deleted


class TokenBlacklistStore(Protocol):
    """
    Stateful negative list of session tokens.

    Methods are expected to be idempotent. ``lookup`` deletes entries it finds
    expired so the list never grows past live revocations.
    """

    def lookup(self, token: str, *, now: datetime) -> BlacklistStatus: ...
    def add(self, *, token: str, user_id: int | None, expires_at: datetime) -> bool: ...
    def purge_expired(self, *, now: datetime) -> int: ...


class InMemoryBlacklistStore(TokenBlacklistStore):
    """Dictionary-backed blacklist for unit tests."""

    def __init__(self) -> None:
        self.entries: dict[str, tuple[int | None, datetime]] = {}

    def lookup(self, token: str, *, now: datetime) -> BlacklistStatus:
        entry = self.entries.get(token)
        if entry is None:
            return BlacklistStatus.ABSENT
        if entry[1] <= now:
            del self.entries[token]
            return BlacklistStatus.EXPIRED
        return BlacklistStatus.REVOKED

    def add(self, *, token: str, user_id: int | None, expires_at: datetime) -> bool:
        if token in self.entries:
            return False
        self.entries[token] = (user_id, expires_at)
        return True

    def purge_expired(self, *, now: datetime) -> int:
        stale = [t for t, (_, exp) in self.entries.items() if exp <= now]
        for token in stale:
            del self.entries[token]
        return len(stale)
