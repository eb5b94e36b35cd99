"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping, MutableMapping
from datetime import timedelta
from typing import Any, Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

ASYMMETRIC_PREFIXES: Final[tuple[str, ...]] = ("RS", "ES", "PS", "Ed")


# Carga .env en desarrollo (no hace nada si no existe)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_int(name: str, default: int) -> int:
    """Parse an integer from an environment variable, falling back to ``default``."""
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    return int(val)


def engine_options(database_uri: str, statement_timeout_ms: int) -> dict[str, Any]:
    """Build ``SQLALCHEMY_ENGINE_OPTIONS`` for the given database.

    PostgreSQL connections get a server-side ``statement_timeout`` so that no
    store call outlives the request deadline enforced by the WSGI server.
    """
    options: dict[str, Any] = {"pool_pre_ping": True}
    if database_uri.startswith("postgresql"):
        options["pool_timeout"] = 5
        if statement_timeout_ms > 0:
            options["connect_args"] = {"options": f"-c statement_timeout={statement_timeout_ms}"}
    return options


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    SECRET_KEY: str
        Flask secret. Not used for tokens, kept for extensions that need it.
    JWT_ALGORITHM: str
        Signing algorithm of the tokens this authority verifies.
    JWT_SECRET_KEY / JWT_PUBLIC_KEY: str
        Verification key for symmetric / asymmetric algorithms.
    JWT_DECODE_ISSUER / JWT_DECODE_AUDIENCE: str
        Expected ``iss`` and ``aud`` claims of every verified token.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    DB_STATEMENT_TIMEOUT_MS: int
        Per-statement deadline applied on PostgreSQL connections.
    REDIS_URL: str | None
        Enables the revocation cache when set.
    REDIS_SOCKET_TIMEOUT_MS: int
        Connect and read timeout of every cache call.
    OAUTH_REALM: str
        Realm advertised in ``WWW-Authenticate`` on client auth failures.
    INTROSPECT_OWN_TOKENS_ONLY: bool
        Report tokens owned by other clients as inactive.
    AUDIT_TOKEN_HASH_PREFIX_LENGTH: int
        Hex characters of the token hash recorded in audit metadata.
    LOG_LEVEL / LOG_JSON:
        Root logging verbosity and output format.
    CORS_ORIGINS: str
        Comma-separated list of origins allowed to call ``/oauth/revoke``.
    TRUSTED_PROXY_HOPS: int
        Reverse proxies trusted for ``X-Forwarded-*`` headers.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"

    # Secretos / seguridad
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "CHANGE_ME_JWT")
    JWT_PUBLIC_KEY = os.getenv("JWT_PUBLIC_KEY")
    JWT_PRIVATE_KEY = os.getenv("JWT_PRIVATE_KEY")
    JWT_DECODE_ISSUER = os.getenv("JWT_ISSUER", "http://localhost:3000")
    JWT_ENCODE_ISSUER = JWT_DECODE_ISSUER
    JWT_DECODE_AUDIENCE = os.getenv("JWT_AUDIENCE", "api_resource_dev")
    JWT_ENCODE_AUDIENCE = JWT_DECODE_AUDIENCE
    JWT_DECODE_LEEWAY = env_int("JWT_LEEWAY_SECONDS", 0)
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(seconds=env_int("JWT_ACCESS_TOKEN_EXPIRES", 3600))
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(seconds=env_int("JWT_REFRESH_TOKEN_EXPIRES", 30 * 24 * 3600))

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)
    DB_STATEMENT_TIMEOUT_MS = env_int("DB_STATEMENT_TIMEOUT_MS", 5000)
    SQLALCHEMY_ENGINE_OPTIONS = engine_options(SQLALCHEMY_DATABASE_URI, DB_STATEMENT_TIMEOUT_MS)

    # Cache
    REDIS_URL = os.getenv("REDIS_URL")
    REDIS_SOCKET_TIMEOUT_MS = env_int("REDIS_SOCKET_TIMEOUT_MS", 250)

    # OAuth endpoints
    OAUTH_REALM = os.getenv("OAUTH_REALM", "token-authority")
    INTROSPECT_OWN_TOKENS_ONLY = env_bool("INTROSPECT_OWN_TOKENS_ONLY", False)
    AUDIT_TOKEN_HASH_PREFIX_LENGTH = env_int("AUDIT_TOKEN_HASH_PREFIX_LENGTH", 10)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging, CORS & proxies
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_JSON = env_bool("LOG_JSON", True)
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:5173")
    TRUSTED_PROXY_HOPS = env_int("TRUSTED_PROXY_HOPS", 1)

    # Built-ins de Flask
    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development.

    Notes
    -----
    Enables debug mode by default and emits human-readable logs unless
    ``LOG_JSON`` says otherwise.
    """

    DEBUG = env_bool("FLASK_DEBUG", True)
    LOG_JSON = env_bool("LOG_JSON", False)
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Forces ``TESTING`` mode and disables debug logs.
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Pins issuer, audience and signing key so tokens minted in tests verify.
    - Never talks to Redis; tests inject a cache explicitly.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SQLALCHEMY_ENGINE_OPTIONS: dict[str, Any] = {}
    JWT_ALGORITHM = "HS256"
    JWT_SECRET_KEY = "test-signing-key-with-enough-entropy-0123456789"
    JWT_PUBLIC_KEY = None
    JWT_DECODE_ISSUER = JWT_ENCODE_ISSUER = "http://localhost:3000"
    JWT_DECODE_AUDIENCE = JWT_ENCODE_AUDIENCE = "api_resource_test"
    REDIS_URL = None
    INTROSPECT_OWN_TOKENS_ONLY = False
    LOG_LEVEL = "WARNING"
    PROPAGATE_EXCEPTIONS = True


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments.

    Notes
    -----
    Keeps debug and SQL echoing disabled and refuses to boot with the
    placeholder signing key or without an explicit database.
    """

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False

    @staticmethod
    def validate(config: MutableMapping[str, Any]) -> None:
        """Fail fast on settings that would make token verification unsafe."""
        algorithm = str(config.get("JWT_ALGORITHM", ""))
        if algorithm.startswith(ASYMMETRIC_PREFIXES):
            if not config.get("JWT_PUBLIC_KEY"):
                raise RuntimeError(f"JWT_PUBLIC_KEY is required for {algorithm}")
        elif config.get("JWT_SECRET_KEY") in (None, "", "CHANGE_ME_JWT"):
            raise RuntimeError("JWT_SECRET_KEY must be set in production")
        if not os.getenv("DATABASE_URL"):
            raise RuntimeError("DATABASE_URL must be set in production")


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Returns
    -------
    type[BaseConfig]
        Class to pass to :meth:`flask.Config.from_object`.

    Notes
    -----
    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
