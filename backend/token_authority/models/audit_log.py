"""Security audit trail of client-initiated token operations."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Boolean, ForeignKey, Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from token_authority.core.extensions import db

from .base import PKMixin, ReprMixin, UTCDateTime


class AuditLog(PKMixin, ReprMixin, db.Model):
    """
    One audited attempt.

    Never contains token material: ``details`` carries at most a short prefix
    of the token hash.
    """

    __tablename__ = "audit_logs"

    timestamp: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False, server_default=func.now())
    oauth_client_id: Mapped[int | None] = mapped_column(
        ForeignKey("oauth_clients.id", ondelete="SET NULL"), nullable=True
    )
    actor_client_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    action: Mapped[str] = mapped_column(String(100), nullable=False)
    resource: Mapped[str] = mapped_column(String(255), nullable=False)
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
    success: Mapped[bool] = mapped_column(Boolean, nullable=False)
    details: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    __table_args__ = (Index("ix_audit_logs_client_timestamp", "oauth_client_id", "timestamp"),)
