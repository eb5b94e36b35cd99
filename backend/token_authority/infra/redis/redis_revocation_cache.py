from __future__ import annotations

import logging
from datetime import datetime
from typing import cast

import redis  # type: ignore[import-untyped]
from redis.exceptions import RedisError  # type: ignore[import-untyped]

from token_authority.services._shared.ports import Clock, RevocationCache, SystemClock

log = logging.getLogger(__name__)


class RedisRevocationCache(RevocationCache):
    """
    Revoked keys mirrored into Redis with a TTL equal to their remaining lifetime.

    The relational blacklist stays authoritative. Redis errors therefore
    degrade to a cache miss on reads and to a logged no-op on writes.
    """

    def __init__(self, r: redis.Redis, *, prefix: str = "revoked_token:", clock: Clock | None = None):
        self.r = r
        self.prefix = prefix
        self.clock = clock or SystemClock()

    def _k(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def is_revoked(self, key: str) -> bool:
        try:
            return cast(int, self.r.exists(self._k(key))) == 1
        except RedisError:
            log.warning("Revocation cache read failed; using blacklist table", exc_info=True)
            return False

    def remember(self, *, key: str, expires_at: datetime) -> None:
        ttl = int((expires_at - self.clock.now()).total_seconds())
        if ttl <= 0:
            # Token already expired; it can never verify again.
            return
        try:
            self.r.set(self._k(key), "1", ex=ttl)
        except RedisError:
            log.warning("Revocation cache write failed for %s", key, exc_info=True)
