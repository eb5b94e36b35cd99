"""OAuth client repository."""

from __future__ import annotations

from sqlalchemy import select

from token_authority.models.oauth_client import OAuthClient
from token_authority.repositories.base import BaseRepository


class OAuthClientRepository(BaseRepository[OAuthClient]):
    """Persistence-only repository for :class:`OAuthClient`."""

    model = OAuthClient

    def get_by_client_id(self, client_id: str) -> OAuthClient | None:
        """Fetch a client by its public identifier, active or not.

        :param client_id: Identifier presented by the caller.
        :returns: Client row or ``None``.
        """
        stmt = select(OAuthClient).where(OAuthClient.client_id == client_id)
        return self._first(stmt)

