"""Repository package exposing persistence-layer access for all token models."""

from __future__ import annotations

from token_authority.repositories.access_token import AccessTokenRepository
from token_authority.repositories.audit_log import AuditLogRepository
from token_authority.repositories.base import BaseRepository
from token_authority.repositories.oauth_client import OAuthClientRepository
from token_authority.repositories.refresh_token import RefreshTokenRepository
from token_authority.repositories.token_blacklist import BlacklistEntry, TokenBlacklistRepository
from token_authority.repositories.user import UserRepository

__all__ = [
    "AccessTokenRepository",
    "AuditLogRepository",
    "BaseRepository",
    "BlacklistEntry",
    "OAuthClientRepository",
    "RefreshTokenRepository",
    "TokenBlacklistRepository",
    "UserRepository",
]
