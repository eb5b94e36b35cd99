"""Registered OAuth 2.0 clients."""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, Enum, String, true
from sqlalchemy.orm import Mapped, mapped_column

from token_authority.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin, UTCDateTime


class ClientType(str, enum.Enum):
    """RFC 6749 §2.1 client types."""

    CONFIDENTIAL = "confidential"
    PUBLIC = "public"


class OAuthClient(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    A client allowed to call the introspection and revocation endpoints.

    Fields
    ------
    client_id : str
        Public identifier sent by the client (Basic username or form field).
    client_secret_hash : str | None
        Werkzeug hash of the secret. Always ``NULL`` for public clients.
    client_secret_expires_at : datetime | None
        Instant after which the secret stops authenticating. ``NULL`` never expires.
    client_type : ClientType
        ``confidential`` clients must authenticate with their secret;
        ``public`` clients identify themselves by ``client_id`` only.
    is_active : bool
        Inactive clients fail authentication exactly like unknown ones.
    name : str | None
        Human-readable label.
    """

    __tablename__ = "oauth_clients"

    client_id: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    client_secret_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    client_secret_expires_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    client_type: Mapped[ClientType] = mapped_column(
        Enum(
            ClientType,
            name="oauth_client_type",
            values_callable=lambda members: [m.value for m in members],
            validate_strings=True,
        ),
        nullable=False,
        default=ClientType.CONFIDENTIAL,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())
    name: Mapped[str | None] = mapped_column(String(120), nullable=True)

    __table_args__ = (CheckConstraint("length(client_id) > 0", name="client_id_not_empty"),)

    @property
    def is_confidential(self) -> bool:
        return self.client_type == ClientType.CONFIDENTIAL

    def secret_expired(self, now: datetime) -> bool:
        """Whether the stored secret expired strictly before ``now``."""
        return self.client_secret_expires_at is not None and self.client_secret_expires_at < now


__all__ = ["ClientType", "OAuthClient"]
