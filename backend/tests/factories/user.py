"""Factory Boy definition for :class:`furnibles.models.user.User`."""

from __future__ import annotations

import factory

from furnibles.core.security import hash_password
from furnibles.models.user import User
from tests.factories import BaseFactory

DEFAULT_PASSWORD = "Passw0rd!"


class UserFactory(BaseFactory):
    """
    Build persisted, verified and active :class:`User` instances.

    Notes
    -----
    - Pass ``password="..."`` to choose the plain text. The hash is part of
      the row factory_boy commits, so it survives service rollbacks.
    """

    class Meta:
        model = User

    class Params:
        password = DEFAULT_PASSWORD

    id = None  # let autoincrement handle it
    email = factory.Sequence(lambda n: f"user{n}@example.com")
    first_name = factory.Faker("first_name")
    last_name = factory.Faker("last_name")
    role = "BUYER"
    email_verified = True
    is_active = True
    password_hash = factory.LazyAttribute(lambda o: hash_password(o.password))


class BuyerFactory(UserFactory):
    role = "BUYER"


class SellerFactory(UserFactory):
    role = "SELLER"


class AdminFactory(UserFactory):
    role = "ADMIN"
