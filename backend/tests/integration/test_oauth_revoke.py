"""End-to-end tests for POST /oauth/revoke through the Flask test client."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import func, select

from tests.factories.oauth import DEFAULT_CLIENT_SECRET, AccessTokenFactory, OAuthClientFactory
from tests.helpers.assertions import assert_oauth_error
from tests.helpers.tokens import basic_auth, issue_access_token, issue_refresh_token
from token_authority.models.audit_log import AuditLog
from token_authority.models.token import AccessToken, RefreshToken
from token_authority.models.token_blacklist import TokenBlacklist

REVOKE = "/oauth/revoke"
INTROSPECT = "/oauth/introspect"


@pytest.fixture()
def c1():
    return OAuthClientFactory(client_id="c1")


@pytest.fixture()
def c1_auth(c1):
    return basic_auth("c1", DEFAULT_CLIENT_SECRET)


def _blacklist_count(session) -> int:
    return session.scalar(select(func.count()).select_from(TokenBlacklist))


def _assert_empty_ok(resp) -> None:
    assert resp.status_code == 200
    assert resp.get_data() == b""
    assert resp.headers["Cache-Control"] == "no-store"


class TestRevokeAccessToken:
    def test_revoked_token_then_introspects_inactive(self, client, session, c1, c1_auth):
        raw, _ = issue_access_token(c1, jti="abc")

        _assert_empty_ok(client.post(REVOKE, data={"token": raw}, headers=c1_auth))

        entry = session.get(TokenBlacklist, "abc")
        assert entry is not None
        assert entry.token_type == "access_token"

        resp = client.post(INTROSPECT, data={"token": raw}, headers=c1_auth)
        assert resp.status_code == 200
        assert resp.get_json() == {"active": False}

    def test_revoking_twice_is_idempotent(self, client, session, c1, c1_auth):
        raw, row = issue_access_token(c1)

        first = client.post(REVOKE, data={"token": raw}, headers=c1_auth)
        second = client.post(REVOKE, data={"token": raw}, headers=c1_auth)

        _assert_empty_ok(first)
        _assert_empty_ok(second)
        assert first.get_data() == second.get_data()
        assert _blacklist_count(session) == 1
        assert session.get(TokenBlacklist, row.jti) is not None

    def test_unknown_token_looks_like_success(self, client, session, c1, c1_auth):
        known, _ = issue_access_token(c1)
        revoked = client.post(REVOKE, data={"token": known}, headers=c1_auth)
        unknown = client.post(REVOKE, data={"token": "never-issued"}, headers=c1_auth)

        _assert_empty_ok(unknown)
        assert unknown.status_code == revoked.status_code
        assert unknown.get_data() == revoked.get_data()
        assert _blacklist_count(session) == 1

    def test_other_clients_token_is_left_alone(self, client, session, c1, c1_auth):
        owner = OAuthClientFactory(client_id="c2")
        raw, row = issue_access_token(owner)

        _assert_empty_ok(client.post(REVOKE, data={"token": raw}, headers=c1_auth))

        assert _blacklist_count(session) == 0
        assert session.get(AccessToken, row.id).is_revoked is False

    def test_hint_refresh_still_finds_access_token(self, client, session, c1, c1_auth):
        raw, row = issue_access_token(c1)

        resp = client.post(REVOKE, data={"token": raw, "token_type_hint": "refresh_token"}, headers=c1_auth)

        _assert_empty_ok(resp)
        assert session.get(TokenBlacklist, row.jti) is not None


class TestRevokeRefreshToken:
    def test_cascades_to_unexpired_access_tokens(self, client, session, c1, c1_auth):
        raw, refresh = issue_refresh_token(c1, user_id="user-7")
        live = AccessTokenFactory.create_batch(3, client=c1, user_id="user-7")
        expired = AccessTokenFactory(
            client=c1, user_id="user-7", expires_at=datetime.now(timezone.utc) - timedelta(minutes=5)
        )
        other_user = AccessTokenFactory(client=c1, user_id="user-8")
        live_jtis = [t.jti for t in live]
        untouched = [expired.jti, other_user.jti]

        resp = client.post(REVOKE, data={"token": raw, "token_type_hint": "refresh_token"}, headers=c1_auth)

        _assert_empty_ok(resp)
        assert session.get(RefreshToken, refresh.id).is_revoked is True
        for jti in live_jtis:
            assert session.get(TokenBlacklist, jti).token_type == "access_token"
        for jti in untouched:
            assert session.get(TokenBlacklist, jti) is None
        assert session.get(TokenBlacklist, refresh.jti).token_type == "refresh_token"

    def test_already_revoked_refresh_token_is_a_no_op(self, client, session, c1, c1_auth):
        raw, refresh = issue_refresh_token(c1)
        refresh.is_revoked = True
        session.commit()

        _assert_empty_ok(client.post(REVOKE, data={"token": raw}, headers=c1_auth))
        assert _blacklist_count(session) == 0


class TestRevokeClientAuthentication:
    def test_public_client_identifies_with_client_id_only(self, client, session):
        spa = OAuthClientFactory(client_id="spa", public=True)
        raw, row = issue_access_token(spa)

        resp = client.post(REVOKE, data={"token": raw, "client_id": "spa"})

        _assert_empty_ok(resp)
        assert session.get(TokenBlacklist, row.jti) is not None

    def test_public_client_with_secret_is_rejected_before_token_logic(self, client, session):
        spa = OAuthClientFactory(client_id="spa", public=True)
        raw, _ = issue_access_token(spa)

        resp = client.post(REVOKE, data={"token": raw, "client_id": "spa", "client_secret": "x"})

        assert_oauth_error(resp, 400, "invalid_request")
        assert _blacklist_count(session) == 0

    def test_confidential_client_without_secret(self, client, c1):
        resp = client.post(REVOKE, data={"token": "t", "client_id": "c1"})
        assert_oauth_error(resp, 401, "invalid_client")

    def test_expired_secret_is_invalid_client(self, client, session):
        stale = OAuthClientFactory(
            client_id="stale", client_secret_expires_at=datetime.now(timezone.utc) - timedelta(days=1)
        )
        raw, row = issue_access_token(stale)

        resp = client.post(REVOKE, data={"token": raw}, headers=basic_auth("stale", DEFAULT_CLIENT_SECRET))

        assert_oauth_error(resp, 401, "invalid_client")
        assert resp.headers["WWW-Authenticate"].startswith("Basic ")
        assert session.get(TokenBlacklist, row.jti) is None

    def test_wrong_basic_secret_gets_challenge(self, client, c1):
        resp = client.post(REVOKE, data={"token": "t"}, headers=basic_auth("c1", "nope"))
        assert_oauth_error(resp, 401, "invalid_client")
        assert resp.headers["WWW-Authenticate"].startswith("Basic ")

    def test_client_auth_is_checked_before_body(self, client):
        # No credentials and no token: authentication fails first.
        resp = client.post(REVOKE, data={"token_type_hint": "bogus"})
        assert_oauth_error(resp, 401, "invalid_client")

    def test_missing_token_after_auth(self, client, c1, c1_auth):
        resp = client.post(REVOKE, data={"token_type_hint": "access_token"}, headers=c1_auth)
        assert_oauth_error(resp, 400, "invalid_request")

    def test_wrong_content_type(self, client, c1_auth):
        resp = client.post(REVOKE, json={"token": "t"}, headers=c1_auth)
        assert_oauth_error(resp, 415, "invalid_request")


class TestRevokeAudit:
    def test_one_audit_row_per_attempt_without_token_material(self, client, session, c1, c1_auth):
        raw, _ = issue_access_token(c1)

        client.post(
            REVOKE,
            data={"token": raw, "token_type_hint": "access_token"},
            headers={**c1_auth, "User-Agent": "pytest-agent"},
        )
        client.post(REVOKE, data={"token": "unknown"}, headers=c1_auth)

        rows = session.scalars(select(AuditLog).order_by(AuditLog.id)).all()
        assert len(rows) == 2
        first, second = rows
        assert first.action == "token_revocation_attempt"
        assert first.actor_client_id == "c1"
        assert first.success is True
        assert first.resource == "token_type_hint:access_token"
        assert first.user_agent == "pytest-agent"
        assert first.details["outcome"] == "access_token"
        assert raw not in str(first.details)
        assert len(first.details["token_hash_prefix"]) == 10
        assert second.resource == "token_type_hint:any"
        assert second.details["outcome"] == "not_found"
        assert second.success is True

    def test_failed_client_auth_is_not_audited(self, client, session, c1):
        client.post(REVOKE, data={"token": "t"}, headers=basic_auth("c1", "nope"))
        assert session.scalar(select(func.count()).select_from(AuditLog)) == 0


class TestRevokeCors:
    def test_preflight_allows_configured_origin(self, client):
        resp = client.options(
            REVOKE,
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Authorization, Content-Type",
            },
        )
        assert resp.headers.get("Access-Control-Allow-Origin") == "http://localhost:5173"

    def test_introspection_has_no_cors(self, client):
        resp = client.options(
            INTROSPECT,
            headers={"Origin": "http://localhost:5173", "Access-Control-Request-Method": "POST"},
        )
        assert "Access-Control-Allow-Origin" not in resp.headers
