"""Revocation denylist keyed by JWT ID."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from token_authority.core.extensions import db

from .base import ReprMixin, UTCDateTime


class TokenBlacklist(ReprMixin, db.Model):
    """
    A revoked token identifier.

    An entry dominates the token store: a token whose ``jti`` is listed here
    is inactive no matter what its signature or store row say. Entries are
    append-only and may be purged once ``expires_at`` has passed, since the
    token would fail verification by then anyway.

    Fields
    ------
    jti : str
        Primary key. Either the JWT ``jti`` claim or a discriminated
        ``"{token_type}:{row_id}"`` fallback for tokens without one.
    token_type : str
        ``access_token`` or ``refresh_token``.
    expires_at : datetime
        Expiry copied from the revoked token.
    blacklisted_at : datetime
        Time of the first revocation.
    """

    __tablename__ = "token_blacklist"

    jti: Mapped[str] = mapped_column(String(255), primary_key=True)
    token_type: Mapped[str] = mapped_column(String(20), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    blacklisted_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, server_default=func.now())

    __table_args__ = (Index("ix_token_blacklist_expires_at", "expires_at"),)
