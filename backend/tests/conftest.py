"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside a SAVEPOINT-backed transaction against an in-memory
SQLite database so data changes never leak between cases.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Generator
from typing import Any

import pytest
from flask import Flask
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from furnibles.core.config import TestingConfig
from furnibles.core.extensions import db as _db  # Flask-SQLAlchemy instance
from furnibles.factory import create_app  # application factory under test
from tests.helpers.auth import auth_headers, issue_token


@pytest.fixture(scope="session")
def app() -> Generator[Flask, None, None]:
    """Create a Flask application configured for testing.

    The application context stays pushed for the whole session so that
    requests issued through the test client reuse it instead of tearing down
    the monkey-patched session after every call.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    application = create_app(TestingConfig, instance_relative_config=False)
    application.logger.setLevel("WARNING")
    with application.app_context():
        yield application


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.
    """
    engine = _db.engine
    if engine.dialect.name == "sqlite":
        # pysqlite manages transactions on its own and turns the release of
        # the outermost SAVEPOINT into a COMMIT; hand control to SQLAlchemy.
        @event.listens_for(engine, "connect")
        def _disable_pysqlite_txn(dbapi_conn, _record):  # pragma: no cover - driver glue
            dbapi_conn.isolation_level = None

        @event.listens_for(engine, "begin")
        def _emit_begin(conn):  # pragma: no cover - driver glue
            conn.exec_driver_sql("BEGIN")

        engine.dispose()

    _db.create_all()
    yield _db
    _db.session.remove()
    _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Keep a dedicated DBAPI connection open for the whole session."""
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(db, connection):
    """Provide a SQLAlchemy session wrapped in an outer transaction.

    Yields
    ------
    sqlalchemy.orm.scoping.scoped_session
        Scoped session bound to the shared connection. Service-level commits
        only release SAVEPOINTs; the outer transaction is rolled back after
        each test.
    """
    top_trans = connection.begin()

    SessionFactory = sessionmaker(
        bind=connection,
        autoflush=False,
        join_transaction_mode="create_savepoint",
    )
    scoped = scoped_session(SessionFactory)

    # Monkey-patch db.session so app code uses this scoped session
    original_session = db.session
    db.session.remove()
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        top_trans.rollback()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the transactional session fixture."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield


# -- HTTP helpers --------------------------------------------------------------
@pytest.fixture()
def client(app: Flask) -> Any:
    """Return a Flask test client."""
    return app.test_client()


@pytest.fixture()
def token_for() -> Callable[..., str]:
    """Return a helper issuing an access token for a persisted user."""
    return issue_token


@pytest.fixture()
def headers_for() -> Callable[..., dict[str, str]]:
    """Return a helper building ``Authorization`` headers for a user."""
    return auth_headers


@pytest.fixture()
def freeze_time() -> Callable[[str | None], Any]:
    """Factory returning :func:`freezegun.freeze_time`.

    Examples
    --------
    >>> def test_with_frozen_time(freeze_time):
    ...     with freeze_time("2024-01-01"):
    ...         ...
    """

    from freezegun import freeze_time as _freeze_time

    def _factory(target: str | None = None) -> Any:
        return _freeze_time(target or "2024-01-01")

    return _factory
