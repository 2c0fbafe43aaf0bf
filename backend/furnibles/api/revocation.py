"""Revocation gate wiring: a ``before_request`` hook denying blacklisted tokens."""

from __future__ import annotations

from collections.abc import Callable

from flask import Flask, current_app, request
from sqlalchemy.orm import sessionmaker

from furnibles.api.deps import bearer_token
from furnibles.core.errors import TokenRevoked
from furnibles.core.extensions import db, get_redis
from furnibles.infra.db.sqlalchemy_blacklist_store import SQLAlchemyBlacklistStore
from furnibles.infra.redis.redis_blacklist_store import RedisBlacklistStore
from furnibles.services._shared.ports import TokenBlacklistStore
from furnibles.services.auth.revocation import GateDecision, RevocationGate


def blacklist_store() -> TokenBlacklistStore:
    """Return the blacklist store selected by ``TOKEN_BLACKLIST_BACKEND``."""
    if current_app.config.get("TOKEN_BLACKLIST_BACKEND") == "redis":
        return RedisBlacklistStore(get_redis())
    return SQLAlchemyBlacklistStore()


def _store_factory(timeout: float | None) -> Callable[[], TokenBlacklistStore]:
    """
    Build the store factory handed to the gate.

    With a timeout the lookup runs on a worker thread, so the database store
    gets sessions bound to the engine instead of the request-scoped one.
    """
    if current_app.config.get("TOKEN_BLACKLIST_BACKEND") == "redis":
        return lambda: RedisBlacklistStore(get_redis())
    if timeout is None:
        return SQLAlchemyBlacklistStore
    factory = sessionmaker(bind=db.engine)
    return lambda: SQLAlchemyBlacklistStore(session_factory=factory)


def is_public_endpoint(endpoint: str | None, public: frozenset[str]) -> bool:
    # Unknown routes fall through to the 404 handler.
    return endpoint is None or endpoint in public or endpoint == "static"


def init_app(app: Flask) -> None:
    """Install the gate; it runs before every handler except public ones."""

    from furnibles.api.v1 import PUBLIC_ENDPOINTS

    @app.before_request
    def _revocation_gate() -> None:
        if request.method == "OPTIONS":
            return None
        if is_public_endpoint(request.endpoint, PUBLIC_ENDPOINTS):
            return None
        token = bearer_token()
        if token is None:
            return None

        timeout = current_app.config.get("REVOCATION_CHECK_TIMEOUT")
        gate = RevocationGate(_store_factory(timeout), timeout=timeout)
        if gate.check(token) is GateDecision.DENY:
            raise TokenRevoked()
        return None


__all__ = ["blacklist_store", "init_app", "is_public_endpoint"]
