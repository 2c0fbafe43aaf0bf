# furnibles/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for self-service registration.

    :param email: Login e-mail (normalised by the model).
    :param password: Raw password (hashed before storage).
    :param role: ``BUYER`` or ``SELLER``; ``ADMIN`` is rejected.
    """

    email: str
    password: str
    first_name: str
    last_name: str
    role: str = "BUYER"
    phone: str | None = None
    address: str | None = None


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email.
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class ChangePasswordIn:
    current_password: str
    new_password: str


@dataclass(frozen=True, slots=True)
class ResetPasswordIn:
    token: str
    new_password: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class UserOut:
    """Public view of an account (never includes credentials)."""

    id: int
    email: str
    first_name: str
    last_name: str
    role: str


@dataclass(frozen=True, slots=True)
class ProfileOut:
    id: int
    email: str
    first_name: str
    last_name: str
    role: str
    phone: str | None
    address: str | None
    email_verified: bool
    is_active: bool


@dataclass(frozen=True, slots=True)
class LoginOut:
    """
    Output DTO of a successful login.

    :param access_token: Encoded session JWT.
    :param user: Public view of the authenticated account.
    """

    access_token: str
    user: UserOut


@dataclass(frozen=True, slots=True)
class RegisterOut:
    message: str
    user_id: int


# ------------------------------ Config DTO -------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthConfig:
    """
    Token emission and credential lifecycle configuration.

    :param access_expires: Session token lifetime.
    :type access_expires: timedelta
    :param password_reset_ttl: Validity window of password reset tokens.
    :type password_reset_ttl: timedelta
    """

    access_expires: timedelta = timedelta(hours=24)
    password_reset_ttl: timedelta = timedelta(hours=1)
