"""Unit tests for token records, clients and the UTC datetime column."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from tests.factories.oauth import AccessTokenFactory, OAuthClientFactory, RefreshTokenFactory
from token_authority.models.oauth_client import ClientType
from token_authority.models.token import AccessToken, RefreshToken, TokenType


class TestTokenRecord:
    def test_revocation_key_is_discriminated_by_table(self, session):
        client = OAuthClientFactory()
        access = AccessTokenFactory(client=client, jti=None)
        refresh = RefreshTokenFactory(client=client, jti=None)

        assert access.revocation_key == f"access_token:{access.id}"
        assert refresh.revocation_key == f"refresh_token:{refresh.id}"
        assert AccessToken.token_type is TokenType.ACCESS_TOKEN
        assert RefreshToken.token_type is TokenType.REFRESH_TOKEN

    def test_is_expired_is_inclusive(self):
        at = datetime(2030, 1, 1, tzinfo=timezone.utc)
        token = AccessToken(expires_at=at)

        assert token.is_expired(at) is True
        assert token.is_expired(at - timedelta(seconds=1)) is False

    def test_expiry_round_trips_as_aware_utc(self, session):
        expires = datetime(2030, 5, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))
        row = AccessTokenFactory(expires_at=expires)
        session.expire(row)

        assert row.expires_at == expires
        assert row.expires_at.tzinfo == timezone.utc

    def test_naive_datetimes_are_rejected(self, session):
        with pytest.raises(Exception, match="timezone-aware"):
            AccessTokenFactory(expires_at=datetime(2030, 1, 1))
        session.rollback()

    def test_token_hash_is_unique(self, session):
        AccessTokenFactory(token_hash="a" * 64)
        with pytest.raises(IntegrityError):
            AccessTokenFactory(token_hash="a" * 64)
        session.rollback()


class TestOAuthClient:
    def test_defaults(self, session):
        client = OAuthClientFactory()

        assert client.client_type is ClientType.CONFIDENTIAL
        assert client.is_confidential is True
        assert client.is_active is True
        assert client.client_secret_hash

    def test_public_client_has_no_secret(self, session):
        client = OAuthClientFactory(public=True)

        assert client.is_confidential is False
        assert client.client_secret_hash is None

    def test_client_id_is_unique(self, session):
        OAuthClientFactory(client_id="dup")
        with pytest.raises(IntegrityError):
            OAuthClientFactory(client_id="dup")
        session.rollback()
