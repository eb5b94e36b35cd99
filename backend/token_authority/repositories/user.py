"""User repository used to enrich introspection responses."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from token_authority.models.user import User
from token_authority.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Read-only access to resource owners."""

    model = User

    def get_username(self, user_id: str) -> str | None:
        """Return the username of ``user_id`` or ``None`` when unknown."""
        stmt = select(User.username).where(User.id == user_id)
        return cast(str | None, self.session.execute(stmt).scalar())
