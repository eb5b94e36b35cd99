"""Assertions shared by the OAuth endpoint tests."""

from __future__ import annotations


def assert_no_store(response) -> None:
    """RFC 6749 §5.1: token-bearing responses must not be cached."""
    assert response.headers.get("Cache-Control") == "no-store"
    assert response.headers.get("Pragma") == "no-cache"


def assert_oauth_error(response, status: int, error: str) -> dict:
    assert response.status_code == status, response.get_data(as_text=True)
    body = response.get_json()
    assert body["error"] == error
    assert "error_description" in body
    assert_no_store(response)
    return body
