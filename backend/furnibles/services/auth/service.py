# furnibles/services/auth/service.py
from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.exc import IntegrityError

from furnibles.models.base import as_aware
from furnibles.models.user import User
from furnibles.repositories.user import UserRepository
from furnibles.services._shared.base import BaseService
from furnibles.services._shared.errors import (
    AuthenticationError,
    ConflictError,
    InvalidTokenError,
    NotFoundError,
    ValidationError,
    violates,
)
from furnibles.services._shared.ports import TokenBlacklistStore, TokenProvider
from furnibles.services.auth.dto import (
    AuthConfig,
    ChangePasswordIn,
    LoginIn,
    LoginOut,
    ProfileOut,
    RegisterIn,
    RegisterOut,
    ResetPasswordIn,
    UserOut,
)

log = logging.getLogger(__name__)

SELF_ASSIGNABLE_ROLES = frozenset({"BUYER", "SELLER"})

REGISTERED_MESSAGE = "User registered successfully. Please verify your email address."
FORGOT_PASSWORD_MESSAGE = "If the email exists, you will receive password reset instructions."


class AuthService(BaseService):
    """
    Authentication lifecycle service.

    Session tokens are stateless JWTs issued through a pluggable
    :class:`TokenProvider`; early revocation is a stateful negative list kept
    in a :class:`TokenBlacklistStore` and enforced by the revocation gate.
    Verification and reset tokens are logged at INFO in place of e-mail
    delivery.
    """

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        blacklist_store: TokenBlacklistStore,
        cfg: AuthConfig | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param token_provider: Adapter for issuing/decoding JWTs.
        :param blacklist_store: Revoked-token list written on logout.
        :param cfg: Token lifetime and reset window configuration.
        """
        super().__init__()
        self.tokens = token_provider
        self.blacklist = blacklist_store
        self.cfg = cfg or AuthConfig()

    # ------------------------------------------------------------------ #
    # Registration & verification
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> RegisterOut:
        """
        Create an unverified account and issue its e-mail verification token.

        :raises ValidationError: If ``ADMIN`` is requested.
        :raises ConflictError: If the e-mail is already registered.
        """
        role = (dto.role or "BUYER").strip().upper()
        if role not in SELF_ASSIGNABLE_ROLES:
            raise ValidationError("Role cannot be self-assigned.")

        verification_token = uuid.uuid4().hex
        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            if repo.exists_by_email(dto.email):
                raise ConflictError("User", "User with this email already exists")

            user = User(
                email=dto.email,
                first_name=dto.first_name.strip(),
                last_name=dto.last_name.strip(),
                role=role,
                phone=dto.phone,
                address=dto.address,
                email_verified=False,
                is_active=True,
                email_verification_token=verification_token,
            )
            user.password = dto.password
            try:
                repo.add(user)
            except IntegrityError as exc:
                if violates(exc, "uq_users_email") or violates(exc, "users.email"):
                    raise ConflictError("User", "User with this email already exists") from exc
                raise
            user_id = user.id

        log.info(
            "Email verification token issued: %s",
            verification_token,
            extra={"user_id": user_id},
        )
        return RegisterOut(message=REGISTERED_MESSAGE, user_id=user_id)

    def verify_email(self, token: str) -> dict[str, str]:
        """
        Mark the owner of ``token`` as verified and consume the token.

        :raises InvalidTokenError: If the token is unknown or already used.
        """
        with self.rw_uow() as uow:
            user = uow.users.get_by_verification_token(token) if token else None
            if user is None:
                raise InvalidTokenError("Invalid verification token")
            user.email_verified = True
            user.email_verification_token = None
            uow.users.flush()
            log.info("Email verified", extra={"user_id": user.id})
        return {"message": "Email verified successfully"}

    # ------------------------------------------------------------------ #
    # Login & session tokens
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> LoginOut:
        """
        Authenticate credentials and issue a session token.

        Checks run in order: credentials, e-mail verification, active flag.
        An unverified account is therefore rejected the same way whether or
        not the password is correct.

        :raises AuthenticationError: On any failed check.
        """
        with self.rw_uow() as uow:
            repo: UserRepository = uow.users
            user = repo.authenticate(dto.email, dto.password)
            if user is None:
                raise AuthenticationError("Invalid credentials")
            if not user.email_verified:
                raise AuthenticationError("Please verify your email before logging in")
            if not user.is_active:
                raise AuthenticationError("Account is inactive")

            repo.touch_last_login(user, self.now_utc())
            token = self._issue(user)
            out = LoginOut(access_token=token, user=self._user_out(user))

        log.info("User logged in", extra={"user_id": out.user.id})
        return out

    def refresh_token(self, user_id: int) -> str:
        """
        Re-issue a session token with current claims for ``user_id``.

        :raises NotFoundError: If the user no longer exists.
        :raises AuthenticationError: If the account was deactivated.
        """
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            if not user.is_active:
                raise AuthenticationError("Account is inactive")
            return self._issue(user)

    def logout(self, token: str, user_id: int | None) -> dict[str, str]:
        """
        Blacklist ``token`` until its natural expiry.

        Failures are logged and swallowed: logout always reports success and
        repeating it with the same token is a no-op.
        """
        try:
            expires_at = self.tokens.get_expires_at(token)
            created = self.blacklist.add(token=token, user_id=user_id, expires_at=expires_at)
            log.info(
                "Token blacklisted" if created else "Token already blacklisted",
                extra={"user_id": user_id},
            )
        except Exception:
            log.warning(
                "Failed to blacklist token on logout", extra={"user_id": user_id}, exc_info=True
            )
        return {"message": "Logged out successfully"}

    # ------------------------------------------------------------------ #
    # Passwords
    # ------------------------------------------------------------------ #

    def change_password(self, user_id: int, dto: ChangePasswordIn) -> dict[str, str]:
        """
        Replace the password after checking the current one.

        :raises ValidationError: If ``current_password`` does not match.
        """
        with self.rw_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            if not user.verify_password(dto.current_password):
                raise ValidationError("Current password is incorrect")
            uow.users.set_password(user, dto.new_password)
        log.info("Password changed", extra={"user_id": user_id})
        return {"message": "Password changed successfully"}

    def forgot_password(self, email: str) -> dict[str, str]:
        """
        Issue a one-hour reset token when ``email`` belongs to an account.

        The response is identical whether or not the address is known.
        """
        with self.rw_uow() as uow:
            user = uow.users.get_by_email(email)
            if user is not None:
                token = uuid.uuid4().hex
                user.password_reset_token = token
                user.password_reset_expires_at = self.now_utc() + self.cfg.password_reset_ttl
                uow.users.flush()
                log.info("Password reset token issued: %s", token, extra={"user_id": user.id})
        return {"message": FORGOT_PASSWORD_MESSAGE}

    def reset_password(self, dto: ResetPasswordIn) -> dict[str, str]:
        """
        Set a new password using a reset token and consume the token.

        :raises InvalidTokenError: If the token is unknown or expired.
        """
        with self.rw_uow() as uow:
            user = uow.users.get_by_reset_token(dto.token) if dto.token else None
            expires_at = as_aware(user.password_reset_expires_at) if user else None
            if user is None or expires_at is None or expires_at <= self.now_utc():
                raise InvalidTokenError("Invalid or expired reset token")
            user.password_reset_token = None
            user.password_reset_expires_at = None
            uow.users.set_password(user, dto.new_password)
            log.info("Password reset", extra={"user_id": user.id})
        return {"message": "Password reset successfully"}

    # ------------------------------------------------------------------ #
    # Profile
    # ------------------------------------------------------------------ #

    def get_profile(self, user_id: int) -> ProfileOut:
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            return ProfileOut(
                id=user.id,
                email=user.email,
                first_name=user.first_name,
                last_name=user.last_name,
                role=user.role,
                phone=user.phone,
                address=user.address,
                email_verified=user.email_verified,
                is_active=user.is_active,
            )

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    def _issue(self, user: User) -> str:
        claims: dict[str, Any] = {"email": user.email, "role": user.role}
        return self.tokens.create_access_token(
            identity=user.id,
            additional_claims=claims,
            expires_delta=self.cfg.access_expires,
        )

    @staticmethod
    def _user_out(user: User) -> UserOut:
        return UserOut(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role,
        )

    @staticmethod
    def now_utc() -> datetime:
        return datetime.now(UTC)
