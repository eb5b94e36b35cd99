"""Resource owner identities referenced by issued tokens."""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, validates

from token_authority.core.extensions import db

from .base import ReprMixin, TimestampMixin


class User(ReprMixin, TimestampMixin, db.Model):
    """
    Resource owner known to the authorization server.

    Only the fields needed to enrich introspection responses are mapped here;
    account management lives with the login service.

    Fields
    ------
    id : str
        Subject identifier; the ``sub`` claim of user-bound tokens.
    username : str
        Public handle reported as ``username`` by introspection.
    """

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    username: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)

    @validates("username")
    def _normalize_username(self, key: str, value: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Username is required.")
        return value.strip()
