"""Convenience exports for application schemas."""

from __future__ import annotations

from .oauth import (
    IntrospectionRequestSchema,
    IntrospectionResponseSchema,
    RevocationRequestSchema,
    TokenRequestSchema,
)

__all__ = [
    "IntrospectionRequestSchema",
    "IntrospectionResponseSchema",
    "RevocationRequestSchema",
    "TokenRequestSchema",
]
