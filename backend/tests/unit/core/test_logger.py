"""Unit tests for the logging utility."""

from __future__ import annotations

import json
import logging

from token_authority.core.logger import JSONFormatter, RequestIdFilter, configure_logging


def test_configure_logging_sets_level() -> None:
    """``configure_logging`` should set the root logger level."""

    # Act
    configure_logging("DEBUG", json_output=False)

    # Assert
    assert logging.getLogger().level == logging.DEBUG
    configure_logging("WARNING", json_output=False)


def test_json_formatter_copies_structured_extras() -> None:
    record = logging.LogRecord("token_authority.test", logging.INFO, __file__, 1, "Revocation completed", None, None)
    record.event = "oauth.revoke.completed"
    record.outcome = "not_found"
    record.cascaded = 0
    RequestIdFilter().filter(record)

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "Revocation completed"
    assert payload["event"] == "oauth.revoke.completed"
    assert payload["outcome"] == "not_found"
    assert payload["cascaded"] == 0
    assert payload["request_id"] is None  # outside a request


def test_request_id_is_echoed(client) -> None:
    resp = client.get("/api/v1/health", headers={"X-Request-ID": "req-123"})
    assert resp.headers["X-Request-ID"] == "req-123"


def test_each_request_gets_its_own_id(client) -> None:
    first = client.get("/api/v1/health", headers={"X-Request-ID": "req-a"})
    second = client.get("/api/v1/health", headers={"X-Request-ID": "req-b"})
    generated = client.get("/api/v1/health")

    assert first.headers["X-Request-ID"] == "req-a"
    assert second.headers["X-Request-ID"] == "req-b"
    assert generated.headers["X-Request-ID"] not in {"req-a", "req-b"}
