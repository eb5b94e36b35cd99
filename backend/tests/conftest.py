"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside an outer transaction against an in-memory SQLite
database. The ORM session joins it with ``create_savepoint`` so that service
commits and rollbacks are real, yet nothing leaks between cases.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from typing import Any

import pytest
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from token_authority.core.config import TestingConfig
from token_authority.core.extensions import db as _db  # Flask-SQLAlchemy instance
from token_authority.factory import create_app  # application factory under test
from tests.factories.oauth import DEFAULT_CLIENT_SECRET


def _enable_sqlite_savepoints(engine) -> None:
    """Let SQLAlchemy, not pysqlite, emit BEGIN so SAVEPOINTs behave."""

    @event.listens_for(engine, "connect")
    def _do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _do_begin(conn):
        conn.exec_driver_sql("BEGIN")


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestingConfig` applied.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    os.environ.pop("REDIS_URL", None)
    app = create_app(TestingConfig, instance_relative_config=False)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session.

    Yields
    ------
    flask_sqlalchemy.SQLAlchemy
        Database extension bound to the testing application.
    """
    with app.app_context():
        if _db.engine.dialect.name == "sqlite":
            _enable_sqlite_savepoints(_db.engine)
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
    """Provide a SQLAlchemy session joined to a per-test outer transaction.

    Yields
    ------
    sqlalchemy.orm.scoping.scoped_session
        Scoped session that replaces ``db.session`` for the duration of the
        test. ``commit()`` releases a SAVEPOINT and ``rollback()`` rolls back
        to it; the outer transaction is always rolled back at the end.
    """
    outer = connection.begin()
    scoped = scoped_session(sessionmaker(bind=connection, join_transaction_mode="create_savepoint"))

    original_session = db.session
    db.session.remove()
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        outer.rollback()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


@pytest.fixture()
def client(app, session):
    """Flask test client sharing the transactional session.

    A fresh application context per test keeps ``flask.g`` from leaking
    between cases; requests reuse it instead of pushing their own.
    """
    with app.app_context():
        yield app.test_client()


@pytest.fixture()
def cli_runner(app, session):
    return app.test_cli_runner()


@pytest.fixture()
def confidential_client():
    from tests.factories.oauth import OAuthClientFactory

    return OAuthClientFactory(client_id="c1")


@pytest.fixture()
def public_client():
    from tests.factories.oauth import OAuthClientFactory

    return OAuthClientFactory(client_id="spa", public=True)


@pytest.fixture()
def client_secret() -> str:
    return DEFAULT_CLIENT_SECRET


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the transactional session fixture."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield


@pytest.fixture()
def freeze_time() -> Callable[[str | None], Any]:
    """Factory returning :func:`freezegun.freeze_time`.

    Examples
    --------
    >>> def test_purge(freeze_time):
    ...     with freeze_time("2030-02-15T12:00:00Z"):
    ...         ...
    """

    from freezegun import freeze_time as _freeze_time

    def _factory(target: str | None = None) -> Any:
        return _freeze_time(target or "2030-01-01T00:00:00Z")

    return _factory
