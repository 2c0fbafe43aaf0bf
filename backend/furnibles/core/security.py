"""Password hashing helpers backed by bcrypt."""

from __future__ import annotations

import bcrypt
from flask import current_app, has_app_context

DEFAULT_BCRYPT_ROUNDS = 12


def _rounds() -> int:
    if has_app_context():
        return int(current_app.config.get("BCRYPT_ROUNDS", DEFAULT_BCRYPT_ROUNDS))
    return DEFAULT_BCRYPT_ROUNDS


def hash_password(raw: str, *, rounds: int | None = None) -> str:
    """Return a salted bcrypt hash for ``raw``.

    :param raw: Plain text password.
    :param rounds: Cost factor; defaults to ``BCRYPT_ROUNDS`` from config.
    :returns: The encoded hash (``$2b$...``).
    """
    salt = bcrypt.gensalt(rounds=rounds or _rounds())
    return bcrypt.hashpw(raw.encode("utf-8"), salt).decode("utf-8")


def check_password(raw: str, hashed: str) -> bool:
    """Compare ``raw`` with ``hashed`` in constant time.

    Malformed hashes compare as ``False`` instead of raising.
    """
    if not raw or not hashed:
        return False
    try:
        return bcrypt.checkpw(raw.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False
