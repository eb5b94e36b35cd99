"""Persisted access and refresh token records.

Rows are written at grant time by the token endpoint; this service only reads
them and flips their revocation marker. The raw token is never stored: rows
are addressed by the SHA-256 digest of the token string.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import TYPE_CHECKING, ClassVar

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from token_authority.core.extensions import db

from .base import CreatedAtMixin, PKMixin, ReprMixin, UTCDateTime

if TYPE_CHECKING:
    from .oauth_client import OAuthClient


class TokenType(str, enum.Enum):
    """Token type names as used by ``token_type_hint`` (RFC 7009 §2.1)."""

    ACCESS_TOKEN = "access_token"
    REFRESH_TOKEN = "refresh_token"


class TokenRecordMixin(PKMixin, CreatedAtMixin):
    """Columns shared by both token tables."""

    token_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    jti: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    user_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    oauth_client_id: Mapped[int] = mapped_column(
        ForeignKey("oauth_clients.id", ondelete="CASCADE"), nullable=False
    )
    scope: Mapped[str | None] = mapped_column(Text, nullable=True)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)
    is_revoked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    revoked_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    token_type: ClassVar[TokenType]

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now

    @property
    def revocation_key(self) -> str:
        """Blacklist key used when no JWT ``jti`` is available.

        Discriminated by token type so that ids of the two tables never
        collide in the blacklist key space.
        """
        return f"{self.token_type.value}:{self.id}"


class AccessToken(TokenRecordMixin, ReprMixin, db.Model):
    """Issued access token. Never deleted; revocation only sets the marker."""

    __tablename__ = "access_tokens"
    token_type = TokenType.ACCESS_TOKEN

    client: Mapped[OAuthClient] = relationship("OAuthClient", lazy="joined")

    __table_args__ = (Index("ix_access_tokens_user_client_expiry", "user_id", "oauth_client_id", "expires_at"),)


class RefreshToken(TokenRecordMixin, ReprMixin, db.Model):
    """Issued refresh token. Mutated only to flip its revocation state."""

    __tablename__ = "refresh_tokens"
    token_type = TokenType.REFRESH_TOKEN

    client: Mapped[OAuthClient] = relationship("OAuthClient", lazy="joined")

    __table_args__ = (Index("ix_refresh_tokens_user_client", "user_id", "oauth_client_id"),)
