# token_authority/services/revocation/service.py
"""
Token revocation (RFC 7009).

Once the client is authenticated the endpoint always answers ``200`` with an
empty body. Whether the token existed, belonged to someone else or was
already revoked is recorded in the audit trail and the logs only.
"""

from __future__ import annotations

import logging
from datetime import datetime

from token_authority.core.security import hash_prefix
from token_authority.models.token import TokenType
from token_authority.repositories.token_blacklist import BlacklistEntry
from token_authority.services._shared.base import BaseService
from token_authority.services._shared.errors import InvalidRequestError
from token_authority.services._shared.ports import (
    AuditEvent,
    AuditSink,
    Clock,
    NullRevocationCache,
    RevocationCache,
    TokenVerifier,
)
from token_authority.services.client_auth import (
    AuthenticatedClient,
    ClientAuthenticator,
    ClientCredentialsIn,
)
from token_authority.services.revocation.dto import NOT_FOUND, RevocationResult, RevokeIn
from token_authority.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

log = logging.getLogger(__name__)

AUDIT_ACTION = "token_revocation_attempt"


class RevocationService(BaseService):
    """
    Revoke access and refresh tokens on behalf of their owning client.

    Revoking a refresh token is a cascade: the flip of the refresh row, its own
    blacklist entry and the blacklist entries of every unexpired access token
    of the same ``(user_id, client)`` pair commit together or not at all.
    """

    def __init__(
        self,
        *,
        verifier: TokenVerifier,
        audit_sink: AuditSink,
        cache: RevocationCache | None = None,
        clock: Clock | None = None,
        hash_prefix_length: int = 10,
    ) -> None:
        super().__init__(clock=clock)
        self.verifier = verifier
        self.audit_sink = audit_sink
        self.cache = cache or NullRevocationCache()
        self.hash_prefix_length = hash_prefix_length

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def authenticate(self, creds: ClientCredentialsIn) -> AuthenticatedClient:
        """
        Authenticate the caller before the request body is looked at.

        :raises InvalidClientError: Bad, missing or unknown credentials.
        :raises InvalidRequestError: A public client sent a secret.
        """
        with self.ro_uow() as uow:
            return ClientAuthenticator(uow.clients, self.clock).authenticate(creds)

    def revoke(self, dto: RevokeIn, client: AuthenticatedClient) -> RevocationResult:
        """
        Revoke ``dto.token`` if ``client`` owns it.

        :param dto: Validated request.
        :param client: Result of :meth:`authenticate`.
        :returns: What happened, for logging and tests.
        :raises InvalidRequestError: The token is missing.
        """
        if not dto.token:
            raise InvalidRequestError("token: Missing data for required field.")

        token_hash = self.verifier.get_token_hash(dto.token)
        presented_jti = self.verifier.read_jti(dto.token)
        now = self.clock.now()

        result = RevocationResult(NOT_FOUND)
        with self.rw_uow() as uow:
            for token_type in self.search_order(dto.token_type_hint):
                if token_type is TokenType.ACCESS_TOKEN:
                    result = self._revoke_access(uow, token_hash, presented_jti, client, now)
                else:
                    result = self._revoke_refresh(uow, token_hash, presented_jti, client, now)
                if result.resolved:
                    break

        # Committed: the blacklist table is authoritative from here on.
        for entry in result.entries:
            self.cache.remember(key=entry.jti, expires_at=entry.expires_at)

        prefix = hash_prefix(token_hash, self.hash_prefix_length)
        hint = dto.token_type_hint.value if dto.token_type_hint else None
        self.audit_sink.record(
            AuditEvent(
                client_id=client.client_id,
                oauth_client_id=client.id,
                action=AUDIT_ACTION,
                resource=f"token_type_hint:{hint or 'any'}",
                ip=dto.ip,
                user_agent=dto.user_agent,
                success=True,
                metadata={
                    "token_hash_prefix": prefix,
                    "token_type_hint": hint,
                    "outcome": result.outcome,
                    "cascaded": result.cascaded,
                },
            )
        )
        log.info(
            "Revocation completed",
            extra={
                "event": "oauth.revoke.completed",
                "client_id": client.client_id,
                "token_type_hint": hint,
                "token_hash_prefix": prefix,
                "outcome": result.outcome,
                "cascaded": result.cascaded,
            },
        )
        return result

    def purge_expired_blacklist(self) -> int:
        """Delete blacklist entries past their expiry. Returns the number removed."""
        with self.rw_uow() as uow:
            removed = uow.blacklist.purge_expired(self.clock.now())
        log.info("Purged expired blacklist entries", extra={"event": "oauth.blacklist.purged", "outcome": removed})
        return removed

    @staticmethod
    def search_order(hint: TokenType | None) -> tuple[TokenType, ...]:
        if hint is TokenType.REFRESH_TOKEN:
            return (TokenType.REFRESH_TOKEN, TokenType.ACCESS_TOKEN)
        return (TokenType.ACCESS_TOKEN, TokenType.REFRESH_TOKEN)

    # ------------------------------------------------------------------ #
    # Branches
    # ------------------------------------------------------------------ #

    def _revoke_access(
        self,
        uow: SQLAlchemyUnitOfWork,
        token_hash: str,
        presented_jti: str | None,
        client: AuthenticatedClient,
        now: datetime,
    ) -> RevocationResult:
        row = uow.access_tokens.get_owned_by_hash(token_hash, client.id)
        if row is None:
            return RevocationResult(NOT_FOUND)

        entry = BlacklistEntry(
            jti=presented_jti or row.jti or row.revocation_key,
            token_type=TokenType.ACCESS_TOKEN.value,
            expires_at=row.expires_at,
        )
        uow.blacklist.upsert_many([entry])
        uow.access_tokens.mark_revoked([row.id], now)
        return RevocationResult(TokenType.ACCESS_TOKEN.value, (entry,))

    def _revoke_refresh(
        self,
        uow: SQLAlchemyUnitOfWork,
        token_hash: str,
        presented_jti: str | None,
        client: AuthenticatedClient,
        now: datetime,
    ) -> RevocationResult:
        row = uow.refresh_tokens.get_active_owned_by_hash(token_hash, client.id)
        if row is None:
            return RevocationResult(NOT_FOUND)

        uow.refresh_tokens.mark_revoked(row, now)
        entries = [
            BlacklistEntry(
                jti=presented_jti or row.jti or row.revocation_key,
                token_type=TokenType.REFRESH_TOKEN.value,
                expires_at=row.expires_at,
            )
        ]

        # Client-credentials grants have no user; nothing to cascade to.
        spawned = uow.access_tokens.list_unexpired_for(row.user_id, row.oauth_client_id, now) if row.user_id else []
        entries.extend(
            BlacklistEntry(
                jti=token.jti or token.revocation_key,
                token_type=TokenType.ACCESS_TOKEN.value,
                expires_at=token.expires_at,
            )
            for token in spawned
        )
        uow.blacklist.upsert_many(entries)
        uow.access_tokens.mark_revoked([token.id for token in spawned], now)
        return RevocationResult(TokenType.REFRESH_TOKEN.value, tuple(entries), cascaded=len(spawned))
