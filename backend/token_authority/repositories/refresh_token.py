"""Refresh token store repository."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select

from token_authority.models.token import RefreshToken
from token_authority.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Lookups over issued refresh tokens and their revocation flip."""

    model = RefreshToken

    def get_by_hash(self, token_hash: str) -> RefreshToken | None:
        stmt = select(RefreshToken).where(RefreshToken.token_hash == token_hash)
        return self._first(stmt)

    def get_active_owned_by_hash(self, token_hash: str, oauth_client_id: int) -> RefreshToken | None:
        """Return the non-revoked row issued to ``oauth_client_id``, if any.

        The row is selected ``FOR UPDATE`` where the backend supports it so two
        concurrent revocations of the same token serialize on the flip.
        """
        stmt = (
            select(RefreshToken)
            .where(
                RefreshToken.token_hash == token_hash,
                RefreshToken.oauth_client_id == oauth_client_id,
                RefreshToken.is_revoked.is_(False),
            )
            .with_for_update()
        )
        return self._first(stmt)

    def mark_revoked(self, token: RefreshToken, now: datetime) -> RefreshToken:
        """Flip ``token`` to revoked and flush."""
        token.is_revoked = True
        token.revoked_at = now
        self.flush()
        return token
