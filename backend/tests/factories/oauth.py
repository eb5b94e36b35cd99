"""Factories for OAuth clients and persisted token records."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import factory

from tests.factories import BaseFactory
from token_authority.core.security import hash_client_secret, hash_token
from token_authority.models.oauth_client import ClientType, OAuthClient
from token_authority.models.token import AccessToken, RefreshToken
from token_authority.models.token_blacklist import TokenBlacklist

DEFAULT_CLIENT_SECRET = "s3cret-value"


def _in(delta: timedelta) -> datetime:
    return datetime.now(timezone.utc) + delta


class OAuthClientFactory(BaseFactory):
    """Confidential client by default; ``public=True`` for a public one."""

    class Meta:
        model = OAuthClient

    class Params:
        secret = DEFAULT_CLIENT_SECRET
        public = factory.Trait(client_type=ClientType.PUBLIC)

    client_id = factory.Sequence(lambda n: f"client-{n}")
    client_type = ClientType.CONFIDENTIAL
    is_active = True
    name = factory.Faker("company")
    client_secret_hash = factory.LazyAttribute(
        lambda o: hash_client_secret(o.secret) if o.client_type is ClientType.CONFIDENTIAL else None
    )


class _TokenRecordFactory(BaseFactory):
    class Meta:
        abstract = True

    client = factory.SubFactory(OAuthClientFactory)
    user_id = "user-1"
    jti = factory.LazyFunction(lambda: str(uuid4()))
    token_hash = factory.LazyFunction(lambda: hash_token(uuid4().hex))
    scope = "read"
    is_revoked = False


class AccessTokenFactory(_TokenRecordFactory):
    class Meta:
        model = AccessToken

    expires_at = factory.LazyFunction(lambda: _in(timedelta(hours=1)))


class RefreshTokenFactory(_TokenRecordFactory):
    class Meta:
        model = RefreshToken

    expires_at = factory.LazyFunction(lambda: _in(timedelta(days=30)))


class TokenBlacklistFactory(BaseFactory):
    class Meta:
        model = TokenBlacklist

    jti = factory.LazyFunction(lambda: str(uuid4()))
    token_type = "access_token"
    expires_at = factory.LazyFunction(lambda: _in(timedelta(hours=1)))
