# furnibles/services/auth/revocation.py
"""
Per-request revocation decision for bearer tokens.

The gate consults a :class:`TokenBlacklistStore` and answers ALLOW or DENY.
Lookups that fail or exceed the configured timeout resolve to ALLOW: an
unreachable store must not lock every user out, so revocation is best
effort while the store is degraded.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from datetime import UTC, datetime
from enum import Enum

from furnibles.services._shared.ports import BlacklistStatus, TokenBlacklistStore

log = logging.getLogger(__name__)


class GateDecision(Enum):
    ALLOW = "allow"
    DENY = "deny"


# Shared across gates; lookups are short and I/O bound.
_EXECUTOR = ThreadPoolExecutor(max_workers=8, thread_name_prefix="revocation")


class RevocationGate:
    """
    Decide whether a bearer token may proceed.

    :param store_factory: Callable returning the store to query. It is
        invoked on the thread that performs the lookup.
    :param timeout: Seconds to wait for the lookup. ``None`` runs it inline
        on the caller's thread without a bound.
    :param clock: Returns the current UTC time (injectable for tests).
    """

    def __init__(
        self,
        store_factory: Callable[[], TokenBlacklistStore],
        *,
        timeout: float | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.store_factory = store_factory
        self.timeout = timeout
        self.clock = clock or (lambda: datetime.now(UTC))

    def _lookup(self, token: str) -> BlacklistStatus:
        return self.store_factory().lookup(token, now=self.clock())

    def check(self, token: str | None) -> GateDecision:
        """Return the decision for ``token`` (``None`` means no bearer token)."""
        if not token:
            return GateDecision.ALLOW

        try:
            if self.timeout is None:
                status = self._lookup(token)
            else:
                status = _EXECUTOR.submit(self._lookup, token).result(timeout=self.timeout)
        except FutureTimeoutError:
            log.warning("Revocation check timed out after %ss; allowing request", self.timeout)
            return GateDecision.ALLOW
        except Exception:
            log.warning("Revocation check failed; allowing request", exc_info=True)
            return GateDecision.ALLOW

        if status is BlacklistStatus.REVOKED:
            return GateDecision.DENY
        if status is BlacklistStatus.EXPIRED:
            log.info("Expired blacklist entry removed")
        return GateDecision.ALLOW
