"""Unit tests for TokenBlacklistRepository."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from tests.factories.oauth import TokenBlacklistFactory
from token_authority.models.token_blacklist import TokenBlacklist
from token_authority.repositories.token_blacklist import BlacklistEntry, TokenBlacklistRepository

NOW = datetime.now(timezone.utc).replace(microsecond=0)


class TestTokenBlacklistRepository:
    @pytest.fixture()
    def repo(self, session):
        return TokenBlacklistRepository(session)

    def test_upsert_is_idempotent_and_refreshes_expiry(self, repo, session):
        repo.upsert("abc", "access_token", NOW + timedelta(minutes=5))
        repo.upsert("abc", "access_token", NOW + timedelta(hours=1))
        session.commit()

        rows = session.query(TokenBlacklist).filter_by(jti="abc").all()
        assert len(rows) == 1
        assert rows[0].expires_at == NOW + timedelta(hours=1)
        assert repo.is_blacklisted("abc")

    def test_upsert_many_writes_one_statement_and_collapses_duplicates(self, repo, session):
        written = repo.upsert_many(
            [
                BlacklistEntry("a", "access_token", NOW + timedelta(minutes=1)),
                BlacklistEntry("b", "access_token", NOW + timedelta(minutes=2)),
                BlacklistEntry("a", "access_token", NOW + timedelta(minutes=3)),
            ]
        )
        session.commit()

        assert written == 2
        assert session.get(TokenBlacklist, "a").expires_at == NOW + timedelta(minutes=3)
        assert repo.upsert_many([]) == 0

    def test_purge_expired_keeps_live_entries(self, repo, session):
        TokenBlacklistFactory(jti="dead", expires_at=NOW - timedelta(seconds=1))
        TokenBlacklistFactory(jti="alive", expires_at=NOW + timedelta(minutes=1))

        removed = repo.purge_expired(NOW)
        session.commit()

        assert removed == 1
        assert not repo.is_blacklisted("dead")
        assert repo.is_blacklisted("alive")
