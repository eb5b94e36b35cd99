from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass(frozen=True, slots=True)
class AuditEvent:
    """
    A security-relevant attempt made by an authenticated client.

    :param client_id: Public identifier of the acting client.
    :param oauth_client_id: Primary key of the acting client.
    :param action: Stable action name, e.g. ``token_revocation_attempt``.
    :param resource: What the action targeted, e.g. ``token_type_hint:any``.
    :param ip: Caller address as seen after proxy resolution.
    :param user_agent: Caller ``User-Agent``.
    :param success: Whether the attempt completed.
    :param metadata: Extra context. Must never contain token material.
    """

    client_id: str
    oauth_client_id: int | None
    action: str
    resource: str
    ip: str | None
    user_agent: str | None
    success: bool
    metadata: dict[str, Any] = field(default_factory=dict)


class AuditSink(Protocol):
    """Port accepting audit events."""

    def record(self, event: AuditEvent) -> None: ...


class InMemoryAuditSink(AuditSink):
    """Collects events in a list; used in unit tests."""

    def __init__(self) -> None:
        self.events: list[AuditEvent] = []

    def record(self, event: AuditEvent) -> None:
        self.events.append(event)
