"""
token_authority.services._shared.ports
======================================

Collection of *ports* (hexagonal interfaces) that the OAuth services depend on.

Modules
-------
- :mod:`token_verifier`:
    :class:`~.TokenVerifier` and :class:`~.VerificationResult`, signature and
    claim verification plus the store lookup hash.
- :mod:`revocation_cache`:
    :class:`~.RevocationCache`, an optional positive-only cache of revoked keys.
- :mod:`audit_sink`:
    :class:`~.AuditSink` and :class:`~.AuditEvent`.
- :mod:`clock`:
    :class:`~.Clock`, the time source for expiry comparisons.

Design Notes
------------
Concrete adapters (Flask-JWT-Extended, Redis, SQLAlchemy) live under
``token_authority.infra``. The in-memory implementations here exist for tests
and for running without optional infrastructure.
"""

from __future__ import annotations

from .audit_sink import AuditEvent, AuditSink, InMemoryAuditSink
from .clock import Clock, FixedClock, SystemClock
from .revocation_cache import InMemoryRevocationCache, NullRevocationCache, RevocationCache
from .token_verifier import StubTokenVerifier, TokenVerifier, VerificationResult

__all__ = [
    "AuditEvent",
    "AuditSink",
    "Clock",
    "FixedClock",
    "InMemoryAuditSink",
    "InMemoryRevocationCache",
    "NullRevocationCache",
    "RevocationCache",
    "StubTokenVerifier",
    "SystemClock",
    "TokenVerifier",
    "VerificationResult",
]
