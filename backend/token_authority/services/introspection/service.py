# token_authority/services/introspection/service.py
"""
Token introspection (RFC 7662).

The handler is a small state machine that always terminates in exactly one
answer. Token problems (bad signature, expiry, revocation, unknown token,
foreign owner) produce ``{"active": false}``; only malformed requests and
failed client authentication raise.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from token_authority.core.security import hash_prefix
from token_authority.models.token import AccessToken, RefreshToken, TokenType
from token_authority.services._shared.base import BaseService
from token_authority.services._shared.errors import InvalidRequestError
from token_authority.services._shared.ports import (
    Clock,
    NullRevocationCache,
    RevocationCache,
    TokenVerifier,
)
from token_authority.services.client_auth import AuthenticatedClient, ClientAuthenticator
from token_authority.services.introspection.dto import IntrospectIn, IntrospectionOut
from token_authority.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork

log = logging.getLogger(__name__)

# ``token_type`` reported for each kind of active token
RESPONSE_TOKEN_TYPES = {
    TokenType.ACCESS_TOKEN: "Bearer",
    TokenType.REFRESH_TOKEN: "refresh_token",
}


@dataclass(frozen=True, slots=True)
class _Attempt:
    """Result of checking the token as one type.

    ``response`` set means the search is over. ``None`` means try the next type.
    """

    response: IntrospectionOut | None
    reason: str


class IntrospectionService(BaseService):
    """
    Answer whether a token is active.

    Reconciliation order for each candidate type:

    1. verify signature and claims,
    2. blacklist by ``jti`` (a hit ends the search as inactive),
    3. store row by hash: present, unexpired and not revoked,
    4. owning ``client_id`` must be resolvable, otherwise fail closed.
    """

    def __init__(
        self,
        *,
        verifier: TokenVerifier,
        cache: RevocationCache | None = None,
        clock: Clock | None = None,
        own_tokens_only: bool = False,
    ) -> None:
        """
        :param verifier: Verifies signatures and computes the lookup hash.
        :param cache: Optional positive-only revocation cache.
        :param clock: Time source for expiry checks.
        :param own_tokens_only: Report tokens of other clients as inactive.
        """
        super().__init__(clock=clock)
        self.verifier = verifier
        self.cache = cache or NullRevocationCache()
        self.own_tokens_only = own_tokens_only

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def introspect(self, dto: IntrospectIn) -> IntrospectionOut:
        """
        Introspect ``dto.token`` on behalf of the authenticated client.

        :raises InvalidRequestError: The token is missing.
        :raises InvalidClientError: Client authentication failed.
        """
        if not dto.token:
            raise InvalidRequestError("token: Missing data for required field.")

        with self.ro_uow() as uow:
            client = ClientAuthenticator(uow.clients, self.clock).authenticate(dto.credentials)
            token_hash = self.verifier.get_token_hash(dto.token)

            attempt = _Attempt(None, "unknown_token")
            for token_type in self.search_order(dto.token_type_hint):
                attempt = self._attempt(uow, token_type, dto.token, token_hash, client)
                if attempt.response is not None:
                    break

        response = attempt.response or IntrospectionOut.inactive()
        log.info(
            "Introspection answered",
            extra={
                "event": "oauth.introspect.active" if response.active else "oauth.introspect.inactive",
                "client_id": client.client_id,
                "token_type_hint": dto.token_type_hint.value if dto.token_type_hint else None,
                "token_hash_prefix": hash_prefix(token_hash),
                "reason": attempt.reason,
            },
        )
        return response

    @staticmethod
    def search_order(hint: TokenType | None) -> tuple[TokenType, ...]:
        """Types to try, hinted type first, extending to the other (RFC 7662 §2.1)."""
        if hint is TokenType.REFRESH_TOKEN:
            return (TokenType.REFRESH_TOKEN, TokenType.ACCESS_TOKEN)
        return (TokenType.ACCESS_TOKEN, TokenType.REFRESH_TOKEN)

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _attempt(
        self,
        uow: SQLAlchemyReadOnlyUnitOfWork,
        token_type: TokenType,
        raw: str,
        token_hash: str,
        client: AuthenticatedClient,
    ) -> _Attempt:
        if token_type is TokenType.ACCESS_TOKEN:
            verification = self.verifier.verify_access_token(raw)
        else:
            verification = self.verifier.verify_refresh_token(raw)
        if not verification.valid or verification.payload is None:
            return _Attempt(None, "verification_failed")
        payload = verification.payload

        jti = payload.get("jti")
        if jti and self._is_blacklisted(uow, str(jti)):
            return _Attempt(IntrospectionOut.inactive(), "blacklisted")

        row: AccessToken | RefreshToken | None
        if token_type is TokenType.ACCESS_TOKEN:
            row = uow.access_tokens.get_by_hash(token_hash)
        else:
            row = uow.refresh_tokens.get_by_hash(token_hash)
        if row is None:
            return _Attempt(None, "not_in_store")
        if row.is_revoked:
            return _Attempt(IntrospectionOut.inactive(), "revoked")
        if row.is_expired(self.clock.now()):
            return _Attempt(IntrospectionOut.inactive(), "expired")
        if not jti and self._is_blacklisted(uow, row.revocation_key):
            return _Attempt(IntrospectionOut.inactive(), "blacklisted")
        if self.own_tokens_only and row.oauth_client_id != client.id:
            return _Attempt(IntrospectionOut.inactive(), "foreign_client")

        client_id = payload.get("client_id") or (row.client.client_id if row.client else None)
        if not client_id:
            return _Attempt(IntrospectionOut.inactive(), "unresolvable_client")

        username = uow.users.get_username(row.user_id) if row.user_id else None
        return _Attempt(
            IntrospectionOut(active=True, claims=self._claims(payload, row, token_type, client_id, username)),
            "active",
        )

    def _is_blacklisted(self, uow: SQLAlchemyReadOnlyUnitOfWork, key: str) -> bool:
        return self.cache.is_revoked(key) or uow.blacklist.is_blacklisted(key)

    @staticmethod
    def _claims(
        payload: Any,
        row: AccessToken | RefreshToken,
        token_type: TokenType,
        client_id: str,
        username: str | None,
    ) -> dict[str, Any]:
        return {
            "scope": payload.get("scope", row.scope),
            "client_id": client_id,
            "username": username,
            "sub": payload.get("sub"),
            "aud": payload.get("aud"),
            "iss": payload.get("iss"),
            "exp": payload.get("exp"),
            "iat": payload.get("iat"),
            "nbf": payload.get("nbf"),
            "jti": payload.get("jti"),
            "token_type": RESPONSE_TOKEN_TYPES[token_type],
            "user_id": row.user_id,
            "permissions": payload.get("permissions"),
        }
