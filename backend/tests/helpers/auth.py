"""Authentication helpers for tests."""

from __future__ import annotations

from datetime import timedelta

from flask_jwt_extended import create_access_token

from furnibles.models.user import User
from furnibles.services._shared.base import ServiceContext


def issue_token(user: User, expires_delta: timedelta | None = None) -> str:
    """Generate a JWT for ``user`` carrying the same claims as login.

    Parameters
    ----------
    user:
        Persisted user whose id becomes the token subject.
    expires_delta:
        Optional expiry delta. If ``None``, the default expiry is used.

    Returns
    -------
    str
        Encoded JWT string.
    """

    return create_access_token(
        identity=str(user.id),
        additional_claims={"email": user.email, "role": user.role},
        expires_delta=expires_delta,
    )


def auth_headers(user: User | None = None, *, token: str | None = None) -> dict[str, str]:
    """Build an ``Authorization`` header from ``user`` or an explicit ``token``."""

    if token is None:
        if user is None:
            raise ValueError("Pass a user or a token")
        token = issue_token(user)
    return {"Authorization": f"Bearer {token}"}


def context_for(user: User) -> ServiceContext:
    """Service context of ``user`` as the API layer would build it."""

    return ServiceContext(actor_id=user.id, role=user.role, request_id="test")
