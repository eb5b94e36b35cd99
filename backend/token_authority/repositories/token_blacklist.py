"""Revocation blacklist repository.

Upserts are idempotent: inserting an existing ``jti`` only refreshes its
``expires_at``. Uniqueness is guaranteed by the primary key, so concurrent
revocations of the same token converge without explicit locking.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Any, NamedTuple

from sqlalchemy import delete, select
from sqlalchemy.dialects import mysql, postgresql, sqlite

from token_authority.models.token_blacklist import TokenBlacklist
from token_authority.repositories.base import BaseRepository


class BlacklistEntry(NamedTuple):
    """Row to upsert into the blacklist."""

    jti: str
    token_type: str
    expires_at: datetime


class TokenBlacklistRepository(BaseRepository[TokenBlacklist]):
    """Persistence for the JTI → expiry denylist."""

    model = TokenBlacklist

    def is_blacklisted(self, jti: str) -> bool:
        """Return ``True`` when ``jti`` has a blacklist entry, expired or not."""
        stmt = select(TokenBlacklist.jti).where(TokenBlacklist.jti == jti).limit(1)
        return self.session.execute(stmt).first() is not None

    def upsert(self, jti: str, token_type: str, expires_at: datetime) -> int:
        """Insert or refresh a single entry. See :meth:`upsert_many`."""
        return self.upsert_many([BlacklistEntry(jti, token_type, expires_at)])

    def upsert_many(self, entries: Iterable[BlacklistEntry]) -> int:
        """Insert or refresh many entries in one ``INSERT ... ON CONFLICT`` statement.

        Duplicated keys in ``entries`` are collapsed first, keeping the latest
        expiry, because a single upsert statement may not touch a row twice.

        :param entries: Entries to write.
        :returns: Number of distinct keys written.
        :raises NotImplementedError: On a backend without native upsert.
        """
        rows: dict[str, dict[str, Any]] = {}
        for entry in entries:
            current = rows.get(entry.jti)
            if current is None or entry.expires_at > current["expires_at"]:
                rows[entry.jti] = entry._asdict()
        if not rows:
            return 0

        values = list(rows.values())
        dialect = self.dialect_name
        if dialect in ("postgresql", "sqlite"):
            insert = postgresql.insert if dialect == "postgresql" else sqlite.insert
            stmt = insert(TokenBlacklist).values(values)
            stmt = stmt.on_conflict_do_update(
                index_elements=[TokenBlacklist.jti],
                set_={"expires_at": stmt.excluded.expires_at},
            )
        elif dialect in ("mysql", "mariadb"):
            stmt = mysql.insert(TokenBlacklist).values(values)
            stmt = stmt.on_duplicate_key_update(expires_at=stmt.inserted.expires_at)
        else:
            raise NotImplementedError(f"Blacklist upsert is not supported on {dialect!r}")

        self.session.execute(stmt)
        return len(values)

    def purge_expired(self, now: datetime) -> int:
        """Delete entries whose ``expires_at`` is at or before ``now``.

        :returns: Number of deleted entries.
        """
        stmt = delete(TokenBlacklist).where(TokenBlacklist.expires_at <= now).execution_options(
            synchronize_session=False
        )
        result = self.session.execute(stmt)
        return int(result.rowcount or 0)
