"""
Abstract Unit of Work contracts.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from token_authority.repositories import (
        AccessTokenRepository,
        AuditLogRepository,
        OAuthClientRepository,
        RefreshTokenRepository,
        TokenBlacklistRepository,
        UserRepository,
    )


class UnitOfWork(ABC):
    """
    Transactional boundary of one introspection or revocation.

    Every repository exposed here shares one session, so a refresh-token
    flip and the blacklist rows of its cascade land in the same transaction.

    Implementations commit on a clean exit and roll back when the block
    raises. Read-only implementations refuse to commit at all.
    """

    clients: OAuthClientRepository
    access_tokens: AccessTokenRepository
    refresh_tokens: RefreshTokenRepository
    blacklist: TokenBlacklistRepository
    audit_logs: AuditLogRepository
    users: UserRepository

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...

    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...
