"""Global Flask extension instances and initialization helpers."""

from __future__ import annotations

import redis  # type: ignore[import-untyped]
from flask import Flask
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

# Constraint names must be stable: the migration in versions/ spells them out.
NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

db: SQLAlchemy = SQLAlchemy(
    session_options={"autoflush": False},
    metadata=MetaData(naming_convention=NAMING_CONVENTION),
)
migrate = Migrate(render_as_batch=True)
# Verification only: this service never mints tokens outside of tests.
jwt = JWTManager()
redis_client: redis.Redis | None = None


def init_app(app: Flask) -> None:
    """Bind the database, migrations and JWT settings, then the optional cache.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. Importing
        :mod:`token_authority.models` here registers every table on
        ``db.metadata`` before Flask-Migrate inspects it.
    """
    db.init_app(app)

    from token_authority import models as _models  # noqa: F401

    migrate.init_app(app, db)
    jwt.init_app(app)
    init_redis(app)


def init_redis(app: Flask) -> None:
    """Connect the revocation cache when ``REDIS_URL`` is set.

    Socket timeouts come from ``REDIS_SOCKET_TIMEOUT_MS`` so a slow cache can
    never hold a request past its deadline. A cache that is configured but
    unreachable at boot is a deployment error and aborts startup.
    """
    global redis_client
    redis_url = app.config.get("REDIS_URL")
    if not redis_url:
        redis_client = None
        app.extensions.pop("redis_client", None)
        return

    timeout = app.config.get("REDIS_SOCKET_TIMEOUT_MS", 250) / 1000
    client = redis.Redis.from_url(redis_url, socket_timeout=timeout, socket_connect_timeout=timeout)
    try:
        client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Revocation cache unreachable at {redis_url!r}") from exc
    redis_client = client
    app.extensions["redis_client"] = client


def get_redis() -> redis.Redis | None:
    """Return the Redis client, or ``None`` when the cache is disabled."""
    return redis_client
