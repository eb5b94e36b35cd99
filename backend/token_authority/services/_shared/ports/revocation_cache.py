from __future__ import annotations

from datetime import datetime
from typing import Protocol


class RevocationCache(Protocol):
    """
    Positive-only cache of blacklisted keys in front of the relational blacklist.

    A hit means "revoked". A miss means nothing: callers must fall back to
    the authoritative blacklist table. Methods are expected to be idempotent.
    """

    def is_revoked(self, key: str) -> bool: ...
    def remember(self, *, key: str, expires_at: datetime) -> None: ...


class NullRevocationCache(RevocationCache):
    """Cache used when Redis is not configured; always misses."""

    def is_revoked(self, key: str) -> bool:
        return False

    def remember(self, *, key: str, expires_at: datetime) -> None:
        return None


class InMemoryRevocationCache(RevocationCache):
    """Simple in-memory cache for unit tests."""

    def __init__(self) -> None:
        self._revoked: dict[str, datetime] = {}

    def is_revoked(self, key: str) -> bool:
        # Expired entries are not cleaned for simplicity in unit tests.
        return key in self._revoked

    def remember(self, *, key: str, expires_at: datetime) -> None:
        self._revoked[key] = expires_at
