from token_authority.models.audit_log import AuditLog
from token_authority.models.oauth_client import ClientType, OAuthClient
from token_authority.models.token import AccessToken, RefreshToken, TokenType
from token_authority.models.token_blacklist import TokenBlacklist
from token_authority.models.user import User

__all__ = [
    "AccessToken",
    "AuditLog",
    "ClientType",
    "OAuthClient",
    "RefreshToken",
    "TokenBlacklist",
    "TokenType",
    "User",
]
