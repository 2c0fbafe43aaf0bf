# furnibles/infra/db/sqlalchemy_blacklist_store.py
from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from sqlalchemy.orm import Session

from furnibles.services._shared.ports import BlacklistStatus, TokenBlacklistStore
from furnibles.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork


class SQLAlchemyBlacklistStore(TokenBlacklistStore):
    """
    Blacklist backed by the ``blacklisted_tokens`` table.

    :param session_factory: Optional callable returning a fresh ``Session``.
        When omitted the Flask-scoped session is used, which ties the store to
        the current request. Worker threads must pass a factory bound to the
        engine; those sessions are closed after each call.
    """

    def __init__(self, session_factory: Callable[[], Session] | None = None) -> None:
        self._session_factory = session_factory

    def _run(self, fn):
        if self._session_factory is None:
            with SQLAlchemyUnitOfWork() as uow:
                return fn(uow)
        session = self._session_factory()
        try:
            with SQLAlchemyUnitOfWork(session=session) as uow:
                return fn(uow)
        finally:
            session.close()

    def lookup(self, token: str, *, now: datetime) -> BlacklistStatus:
        def _lookup(uow: SQLAlchemyUnitOfWork) -> BlacklistStatus:
            entry = uow.blacklist.get_by_token(token)
            if entry is None:
                return BlacklistStatus.ABSENT
            if entry.is_expired(now):
                uow.blacklist.delete_entry(entry)
                return BlacklistStatus.EXPIRED
            return BlacklistStatus.REVOKED

        return self._run(_lookup)

    def add(self, *, token: str, user_id: int | None, expires_at: datetime) -> bool:
        return self._run(
            lambda uow: uow.blacklist.add_if_absent(
                token=token, user_id=user_id, expires_at=expires_at
            )
        )

    def purge_expired(self, *, now: datetime) -> int:
        return self._run(lambda uow: uow.blacklist.purge_expired(now))
