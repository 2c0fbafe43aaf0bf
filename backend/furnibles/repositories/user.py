"""User repository for persistence and credential lookups."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import select

from furnibles.models.user import User
from furnibles.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    This repository focuses on safe lookup and credential fields. It NEVER
    handles JWT creation or revocation.
    """

    model = User

    def _sortable_fields(self):
        return {
            "id": User.id,
            "email": User.email,
            "created_at": User.created_at,
        }

    def _filterable_fields(self):
        return {
            "email": User.email,
            "role": User.role,
        }

    def _updatable_fields(self):
        """Profile fields a user may edit (never credentials or flags)."""
        return {"first_name", "last_name", "phone", "address"}

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :returns: User instance or ``None`` when not found.
        """
        stmt = select(User).where(User.email == email.lower().strip())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_email(self, email: str) -> bool:
        stmt = select(User.id).where(User.email == email.lower().strip())
        return bool(self.session.execute(stmt).first())

    def get_by_verification_token(self, token: str) -> User | None:
        stmt = select(User).where(User.email_verification_token == token)
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def get_by_reset_token(self, token: str) -> User | None:
        stmt = select(User).where(User.password_reset_token == token)
        return cast(User | None, self.session.execute(stmt).scalars().first())

    # ---------------------------- Credential ops ----------------------------

    def authenticate(self, email: str, password: str) -> User | None:
        """Return the user when ``password`` matches, else ``None``.

        Unknown e-mails and wrong passwords are indistinguishable to callers.
        """
        user = self.get_by_email(email)
        if not user or not user.verify_password(password):
            return None
        return user

    def set_password(self, user: User, new_password: str) -> None:
        user.password = new_password  # invokes setter → hash
        self.flush()

    def touch_last_login(self, user: User, when: datetime) -> None:
        user.last_login_at = when
        self.flush()
