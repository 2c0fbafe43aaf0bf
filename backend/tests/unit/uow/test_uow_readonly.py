import pytest
from sqlalchemy import select

from furnibles.models.user import User
from furnibles.uow import SQLAlchemyReadOnlyUnitOfWork as ROuow
from furnibles.uow import SQLAlchemyUnitOfWork as RWuow
from tests.factories.user import UserFactory


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_blocks_orm_flush_writes(self, session):
        """Flushing a pending object inside the RO UoW raises."""
        with ROuow() as uow, pytest.raises(RuntimeError, match="read-only UnitOfWork"):
            uow.session.add(UserFactory.build(password_hash="x"))
            uow.session.flush()

    def test_allows_reads(self, session):
        user = UserFactory()

        with ROuow() as uow:
            fetched = uow.users.get_by_email(user.email)
            assert fetched is not None
            assert fetched.id == user.id

    def test_disallows_commit(self, session):
        with ROuow() as uow, pytest.raises(RuntimeError, match="does not allow commit"):
            uow.commit()

    def test_mutation_is_not_persisted(self, session):
        """A blocked flush leaves the stored value untouched."""
        with RWuow() as uow:
            user = UserFactory.build(password_hash="x")
            uow.users.add(user)
            user_id = user.id
            original_email = user.email

        with ROuow() as uow, pytest.raises(RuntimeError):
            u = uow.users.get(user_id)
            u.first_name = "Mutated"
            uow.session.flush()
        session.rollback()

        email = session.execute(select(User.email).where(User.id == user_id)).scalar_one()
        assert email == original_email
