"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from flask import Response, current_app, g, jsonify, request
from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request

from furnibles.core.errors import Forbidden, Unauthorized
from furnibles.schemas.common import PaginationQuerySchema
from furnibles.services._shared.base import ServiceContext
from furnibles.services._shared.config import MarketplaceConfig, ReviewConfig

F = TypeVar("F", bound=Callable[..., Any])


@dataclass(slots=True)
class Pagination:
    """Container holding pagination arguments parsed from the request."""

    page: int
    limit: int
    sort: list[str]


def parse_pagination(default_limit: int = 20, max_limit: int = 100) -> Pagination:
    """Parse pagination parameters from ``request.args`` using Marshmallow."""

    schema = PaginationQuerySchema(default_limit=default_limit, max_limit=max_limit)
    data = schema.load({k: v for k, v in request.args.items() if k in ("page", "limit", "sort")})
    return Pagination(page=data["page"], limit=data["limit"], sort=data["sort"])


def require_auth(func: F) -> F:
    """Ensure the request carries a valid JWT access token."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request(optional=False)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def require_role(*roles: str) -> Callable[[F], F]:
    """Ensure the verified JWT carries one of ``roles`` in its ``role`` claim."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            verify_jwt_in_request(optional=False)
            claims = get_jwt() or {}
            if claims.get("role") not in roles:
                raise Forbidden("Insufficient permissions")
            return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def current_user_id() -> int:
    """Return the integer user id carried in the verified token's subject."""

    identity = get_jwt_identity()
    try:
        return int(identity)
    except (TypeError, ValueError) as exc:
        raise Unauthorized("Invalid token subject") from exc


def optional_user_id() -> int | None:
    """Return the caller's id when a valid token is present, else ``None``."""

    verify_jwt_in_request(optional=True)
    identity = get_jwt_identity()
    return int(identity) if identity is not None else None


def bearer_token() -> str | None:
    """Return the raw bearer token of the current request, if any."""

    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def anonymous_context() -> ServiceContext:
    """Context for public endpoints; any bearer token is ignored."""

    return ServiceContext(request_id=getattr(g, "request_id", None))


def service_context() -> ServiceContext:
    """Build a :class:`ServiceContext` from the verified JWT (or an anonymous one)."""

    verify_jwt_in_request(optional=True)
    identity = get_jwt_identity()
    claims = get_jwt() if identity is not None else {}
    return ServiceContext(
        actor_id=int(identity) if identity is not None else None,
        role=claims.get("role"),
        request_id=getattr(g, "request_id", None),
    )


def marketplace_config() -> MarketplaceConfig:
    return MarketplaceConfig.from_mapping(current_app.config)


def review_config() -> ReviewConfig:
    return ReviewConfig.from_mapping(current_app.config)


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
