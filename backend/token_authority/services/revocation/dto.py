# token_authority/services/revocation/dto.py
from __future__ import annotations

from dataclasses import dataclass

from token_authority.models.token import TokenType
from token_authority.repositories.token_blacklist import BlacklistEntry

NOT_FOUND = "not_found"

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RevokeIn:
    """
    Input DTO for token revocation.

    :param token: The token the client wants revoked.
    :type token: str
    :param token_type_hint: Optional hint ordering the search.
    :type token_type_hint: TokenType | None
    :param ip: Caller address, recorded in the audit trail.
    :type ip: str | None
    :param user_agent: Caller ``User-Agent``, recorded in the audit trail.
    :type user_agent: str | None
    """

    token: str
    token_type_hint: TokenType | None = None
    ip: str | None = None
    user_agent: str | None = None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RevocationResult:
    """
    What a revocation actually did. Internal only: the HTTP response never
    reflects it.

    :param outcome: ``access_token``, ``refresh_token`` or ``not_found``.
    :param entries: Blacklist entries written in the transaction.
    :param cascaded: Access tokens blacklisted because their refresh token was revoked.
    """

    outcome: str
    entries: tuple[BlacklistEntry, ...] = ()
    cascaded: int = 0

    @property
    def resolved(self) -> bool:
        return self.outcome != NOT_FOUND

