"""
furnibles.services._shared.ports
================================

Collection of *ports* (hexagonal interfaces) that define the contracts for
token issuing and revocation storage.

Modules
-------
- :mod:`token_provider`:
    Defines :class:`~.TokenProvider`, the abstraction for signed token
    creation and decoding.

- :mod:`blacklist_store`:
    Defines :class:`~.TokenBlacklistStore`, the interface for the revoked
    token list consulted by the revocation gate.

Concrete adapters (database, Redis, Flask-JWT-Extended) live under
``furnibles.infra``.
"""

from __future__ import annotations

from .blacklist_store import BlacklistStatus, InMemoryBlacklistStore, TokenBlacklistStore
from .token_provider import StubTokenProvider, TokenProvider

__all__ = [
    "BlacklistStatus",
    "InMemoryBlacklistStore",
    "StubTokenProvider",
    "TokenBlacklistStore",
    "TokenProvider",
]
