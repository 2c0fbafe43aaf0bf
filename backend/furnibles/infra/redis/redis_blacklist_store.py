import hashlib
from datetime import datetime
from typing import cast

import redis  # type: ignore[import-untyped]

from furnibles.services._shared.ports import BlacklistStatus, TokenBlacklistStore


class RedisBlacklistStore(TokenBlacklistStore):
    """
    Blacklist kept as Redis keys that expire with the token.

    Keys are derived from a SHA-256 of the token so raw bearer values never
    reach Redis. Redis evicts entries at their TTL, so ``lookup`` never
    observes an expired entry and ``purge_expired`` has nothing to do.
    """

    def __init__(self, r: redis.Redis):
        self.r = r

    @staticmethod
    def _k(token: str) -> str:
        return "bl:at:" + hashlib.sha256(token.encode("utf-8")).hexdigest()

    def lookup(self, token: str, *, now: datetime) -> BlacklistStatus:
        if cast(int, self.r.exists(self._k(token))) == 1:
            return BlacklistStatus.REVOKED
        return BlacklistStatus.ABSENT

    def add(self, *, token: str, user_id: int | None, expires_at: datetime) -> bool:
        ttl = int(expires_at.timestamp() - datetime.now(expires_at.tzinfo).timestamp())
        if ttl <= 0:
            return False
        # SET NX keeps the first writer; a repeat logout is a no-op
        return bool(self.r.set(self._k(token), str(user_id or ""), ex=ttl, nx=True))

    def purge_expired(self, *, now: datetime) -> int:
        return 0
