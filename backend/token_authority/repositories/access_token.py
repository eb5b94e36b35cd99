"""Access token store repository."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import select, update

from token_authority.models.token import AccessToken
from token_authority.repositories.base import BaseRepository


class AccessTokenRepository(BaseRepository[AccessToken]):
    """Lookups over issued access tokens plus the batched revoked-marker update."""

    model = AccessToken

    def get_by_hash(self, token_hash: str) -> AccessToken | None:
        """Return the row addressed by ``token_hash`` regardless of its owner."""
        stmt = select(AccessToken).where(AccessToken.token_hash == token_hash)
        return self._first(stmt)

    def get_owned_by_hash(self, token_hash: str, oauth_client_id: int) -> AccessToken | None:
        """Return the row only when it was issued to ``oauth_client_id``.

        :param token_hash: SHA-256 hex digest of the presented token.
        :param oauth_client_id: Primary key of the authenticated client.
        """
        stmt = select(AccessToken).where(
            AccessToken.token_hash == token_hash,
            AccessToken.oauth_client_id == oauth_client_id,
        )
        return self._first(stmt)

    def list_unexpired_for(self, user_id: str, oauth_client_id: int, now: datetime) -> list[AccessToken]:
        """All access tokens of ``(user_id, oauth_client_id)`` with ``expires_at > now``.

        Already-revoked rows are included; re-blacklisting them is harmless.
        """
        stmt = (
            select(AccessToken)
            .where(
                AccessToken.user_id == user_id,
                AccessToken.oauth_client_id == oauth_client_id,
                AccessToken.expires_at > now,
            )
            .order_by(AccessToken.id)
        )
        return list(self.session.execute(stmt).scalars().all())

    def mark_revoked(self, ids: Sequence[int], now: datetime) -> int:
        """Set the revoked marker on every row in ``ids`` with a single UPDATE.

        Rows that are already revoked keep their original ``revoked_at``.

        :returns: Number of rows that changed.
        """
        if not ids:
            return 0
        stmt = (
            update(AccessToken)
            .where(AccessToken.id.in_(list(ids)), AccessToken.is_revoked.is_(False))
            .values(is_revoked=True, revoked_at=now)
            .execution_options(synchronize_session="fetch")
        )
        result = self.session.execute(stmt)
        return int(result.rowcount or 0)
