"""Session tokens issued and read through Flask-JWT-Extended."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any, cast

from flask_jwt_extended import create_access_token, decode_token

from furnibles.services._shared.ports import TokenProvider


class JWTTokenProvider(TokenProvider):
    """
    :class:`TokenProvider` backed by the app's ``JWT_*`` settings.

    Needs an application context. Subjects are stringified user ids and the
    ``role``/``email`` claims travel as additional claims.
    """

    def create_access_token(
        self,
        *,
        identity: int | str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        return cast(
            str,
            create_access_token(
                identity=str(identity),
                additional_claims=additional_claims or {},
                expires_delta=expires_delta,
            ),
        )

    def decode(self, token: str) -> dict[str, Any]:
        return cast(dict[str, Any], decode_token(token))

    def get_subject(self, token: str) -> int | str:
        return cast(int | str, self.decode(token)["sub"])

    def get_expires_at(self, token: str) -> datetime:
        """
        Expiry of ``token``, read even if it has just lapsed.

        Logout may race the token's ``exp``; the blacklist entry is then
        written already expired and purged by maintenance.
        """
        claims = cast(dict[str, Any], decode_token(token, allow_expired=True))
        return datetime.fromtimestamp(int(claims["exp"]), tz=UTC)
