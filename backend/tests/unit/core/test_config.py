from __future__ import annotations

import pytest

from token_authority.core.config import (
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    engine_options,
    env_bool,
    get_config,
)


def test_get_config_follows_app_env(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    assert get_config() is TestingConfig
    monkeypatch.setenv("APP_ENV", "nonsense")
    assert get_config() is DevelopmentConfig


@pytest.mark.parametrize(("raw", "expected"), [("1", True), ("Yes", True), ("off", False), ("", False)])
def test_env_bool(monkeypatch, raw, expected):
    monkeypatch.setenv("SOME_FLAG", raw)
    assert env_bool("SOME_FLAG") is expected


def test_engine_options_apply_statement_timeout_on_postgres():
    opts = engine_options("postgresql+psycopg2://u@h/db", 2500)
    assert opts["connect_args"] == {"options": "-c statement_timeout=2500"}
    assert opts["pool_pre_ping"] is True
    assert "connect_args" not in engine_options("sqlite:///x.db", 2500)


def test_production_refuses_placeholder_secret(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://u@h/db")
    with pytest.raises(RuntimeError, match="JWT_SECRET_KEY"):
        ProductionConfig.validate({"JWT_ALGORITHM": "HS256", "JWT_SECRET_KEY": "CHANGE_ME_JWT"})


def test_production_requires_public_key_for_rs256(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://u@h/db")
    with pytest.raises(RuntimeError, match="JWT_PUBLIC_KEY"):
        ProductionConfig.validate({"JWT_ALGORITHM": "RS256", "JWT_PUBLIC_KEY": None})
    ProductionConfig.validate({"JWT_ALGORITHM": "RS256", "JWT_PUBLIC_KEY": "-----BEGIN PUBLIC KEY-----"})


def test_production_requires_database_url(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    with pytest.raises(RuntimeError, match="DATABASE_URL"):
        ProductionConfig.validate({"JWT_ALGORITHM": "HS256", "JWT_SECRET_KEY": "real-secret"})
