"""Tests for the User model."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from furnibles.models.user import User
from tests.factories.user import DEFAULT_PASSWORD, UserFactory


def _user(email: str, role: str = "BUYER") -> User:
    return User(email=email, first_name="Sam", last_name="Joiner", role=role)


class TestUser:
    def test_password_hashing(self, session):
        u = _user("Test@Example.com")
        u.password = "secret123"
        session.add(u)
        session.commit()
        assert u.verify_password("secret123") is True
        assert u.verify_password("wrong") is False
        assert u.password_hash != "secret123"

    def test_password_is_write_only(self):
        u = _user("a@example.com")
        u.password = "x"
        with pytest.raises(AttributeError):
            _ = u.password

    def test_email_normalized_and_unique(self, session):
        u1 = _user("Alice@Example.com")
        u1.password = "pw"
        session.add(u1)
        session.commit()
        assert u1.email == "alice@example.com"

        u2 = _user("alice@example.com")
        u2.password = "pw"
        session.add(u2)
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()

    def test_basic_validations(self):
        with pytest.raises(ValueError):
            _user("not-an-email")
        with pytest.raises(ValueError):
            _user("ok@example.com", role="ROOT")
        with pytest.raises(ValueError):
            _user("ok@example.com").password = ""

    def test_role_is_uppercased_and_login_flags(self):
        u = _user("s@example.com", role="seller")
        u.email_verified = True
        u.is_active = True

        assert u.role == "SELLER"
        assert u.full_name == "Sam Joiner"
        assert u.can_login is True


class TestUserFactory:
    def test_password_hash_is_persisted_with_the_row(self, session):
        default = UserFactory()
        custom = UserFactory(password="Sawdust-42")
        session.expire_all()

        assert default.verify_password(DEFAULT_PASSWORD) is True
        assert custom.verify_password("Sawdust-42") is True
        assert custom.verify_password(DEFAULT_PASSWORD) is False
