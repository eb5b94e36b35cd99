"""Audit sink persisting events to ``audit_logs`` and the application log."""

from __future__ import annotations

import logging
from typing import Any

from token_authority.models.audit_log import AuditLog
from token_authority.services._shared.ports import AuditEvent, AuditSink
from token_authority.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

log = logging.getLogger("token_authority.audit")

# Keys never allowed to reach the audit trail verbatim.
SENSITIVE_KEYS = frozenset(
    {"token", "access_token", "refresh_token", "client_secret", "secret", "password", "authorization"}
)


def sanitize_metadata(details: dict[str, Any]) -> dict[str, Any]:
    """Redact sensitive keys, recursing into nested dictionaries."""
    sanitized: dict[str, Any] = {}
    for key, value in details.items():
        if key.lower() in SENSITIVE_KEYS:
            sanitized[key] = "[REDACTED]"
        elif isinstance(value, dict):
            sanitized[key] = sanitize_metadata(value)
        else:
            sanitized[key] = value
    return sanitized


class SQLAlchemyAuditSink(AuditSink):
    """
    Write each event in its own transaction.

    Runs after the audited operation has committed, so an audit failure
    never rolls back a revocation. Failures still propagate to the caller.
    """

    def record(self, event: AuditEvent) -> None:
        details = sanitize_metadata(event.metadata)
        with SQLAlchemyUnitOfWork() as uow:
            uow.audit_logs.add(
                AuditLog(
                    oauth_client_id=event.oauth_client_id,
                    actor_client_id=event.client_id,
                    action=event.action,
                    resource=event.resource,
                    ip_address=event.ip,
                    user_agent=event.user_agent,
                    success=event.success,
                    details=details,
                )
            )
        log.info(
            "%s %s",
            event.action,
            event.resource,
            extra={"event": event.action, "client_id": event.client_id, **_log_fields(details)},
        )


def _log_fields(details: dict[str, Any]) -> dict[str, Any]:
    return {k: details[k] for k in ("token_hash_prefix", "token_type_hint", "outcome", "cascaded") if k in details}
