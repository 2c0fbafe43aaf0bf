from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any, Protocol


class TokenProvider(Protocol):
    """Port for issuing and decoding signed session tokens."""

    def create_access_token(
        self,
        *,
        identity: int | str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str: ...

    def decode(self, token: str) -> dict[str, Any]: ...

    def get_subject(self, token: str) -> int | str: ...

    def get_expires_at(self, token: str) -> datetime: ...


class StubTokenProvider(TokenProvider):
    """Deterministic token provider used in unit tests."""

    def __init__(self, *, lifetime: timedelta = timedelta(hours=24)) -> None:
        self._lifetime = lifetime
        self._seq = 0
        self._issued: dict[str, dict[str, Any]] = {}

    def create_access_token(
        self,
        *,
        identity: int | str,
        additional_claims: dict[str, Any] | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        self._seq += 1
        now = datetime.now(tz=UTC)
        token = f"access.{identity}.{self._seq}"
        payload: dict[str, Any] = {
            "sub": str(identity),
            "type": "access",
            "jti": f"jti-{self._seq}",
            "iat": int(now.timestamp()),
            "exp": int((now + (expires_delta or self._lifetime)).timestamp()),
        }
        if additional_claims:
            payload.update(additional_claims)
        self._issued[token] = payload
        return token

    def decode(self, token: str) -> dict[str, Any]:
        try:
            return self._issued[token]
        except KeyError:
            raise ValueError("Unknown token") from None

    def get_subject(self, token: str) -> int | str:
        subject = self.decode(token)["sub"]
        if isinstance(subject, int | str):
            return subject
        raise TypeError(f"Unexpected subject type: {type(subject)!r}")

    def get_expires_at(self, token: str) -> datetime:
        exp = int(self.decode(token)["exp"])
        return datetime.fromtimestamp(exp, tz=UTC)
