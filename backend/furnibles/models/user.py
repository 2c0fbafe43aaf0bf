"""User model definition for marketplace accounts."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import Boolean, DateTime, Enum, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates

from furnibles.core.extensions import db
from furnibles.core.security import check_password, hash_password

from .base import PKMixin, ReprMixin, TimestampMixin

# --- Domain Enum ---
USER_ROLES = ("BUYER", "SELLER", "ADMIN")
UserRole = Enum(*USER_ROLES, name="user_role")


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Marketplace account (buyer, seller or admin).

    Fields
    ------
    email : str
        Login email. Stored normalized (lowercase, trimmed).
    password_hash : str
        bcrypt hash (write-only setter via ``password``).
    role : str
        One of ``BUYER``, ``SELLER``, ``ADMIN``.
    email_verified / is_active : bool
        Both must be true for a login to succeed.
    email_verification_token : str | None
        Single-use token consumed by e-mail verification.
    password_reset_token / password_reset_expires_at
        Single-use token issued by "forgot password", valid for one hour.
    last_login_at : datetime | None
        Refreshed on every successful login.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    role: Mapped[str] = mapped_column(UserRole, nullable=False, server_default="BUYER")
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(30))
    address: Mapped[str | None] = mapped_column(Text)

    email_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    email_verification_token: Mapped[str | None] = mapped_column(String(64))
    password_reset_token: Mapped[str | None] = mapped_column(String(64))
    password_reset_expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        UniqueConstraint("email_verification_token", name="uq_users_email_verification_token"),
        UniqueConstraint("password_reset_token", name="uq_users_password_reset_token"),
        Index("ix_users_role", "role"),
    )

    # -------------------- Password API --------------------
    @property
    def password(self) -> Any:  # pragma: no cover - explicit write-only contract
        """
        Disallow reading passwords.

        :raises AttributeError: Always, to ensure password is write-only.
        """
        raise AttributeError("Password is write-only.")

    @password.setter
    def password(self, raw: str) -> None:
        """
        Hash and set the password with the configured bcrypt cost.

        :param raw: Plain text password to hash.
        :type raw: str
        """
        if not isinstance(raw, str) or not raw:
            raise ValueError("Password must be a non-empty string.")
        self.password_hash = hash_password(raw)

    def verify_password(self, raw: str) -> bool:
        """
        Verify a password against the stored hash.

        :param raw: Plain text password candidate.
        :returns: ``True`` if it matches; otherwise ``False``.
        """
        return check_password(raw, self.password_hash)

    # -------------------- Convenience --------------------
    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def can_login(self) -> bool:
        return bool(self.email_verified and self.is_active)

    # -------------------- Validators --------------------
    @validates("email")
    def _normalize_email(self, key: str, value: str) -> str:
        """
        Normalize and validate email.

        :raises ValueError: If email is missing or malformed.
        """
        if not value or not isinstance(value, str):
            raise ValueError("Email is required.")
        v = value.strip().lower()
        # Minimal sanity check; full validation happens at API layer.
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Email format looks invalid.")
        return v

    @validates("role")
    def _validate_role(self, key: str, value: str) -> str:
        v = (value or "").strip().upper()
        if v not in USER_ROLES:
            raise ValueError(f"Unknown role: {value!r}")
        return v
