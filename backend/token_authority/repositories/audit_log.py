"""Audit log repository."""

from __future__ import annotations

from token_authority.models.audit_log import AuditLog
from token_authority.repositories.base import BaseRepository


class AuditLogRepository(BaseRepository[AuditLog]):
    """Append-only persistence for :class:`AuditLog`. Rows are never updated."""

    model = AuditLog
