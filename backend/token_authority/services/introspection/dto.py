# token_authority/services/introspection/dto.py
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from token_authority.models.token import TokenType
from token_authority.services.client_auth.dto import ClientCredentialsIn


@dataclass(frozen=True, slots=True)
class IntrospectIn:
    """
    Input DTO for token introspection.

    :param token: The token presented for introspection.
    :param token_type_hint: Optional hint ordering the search.
    :param credentials: Credentials of the calling client.
    """

    token: str
    token_type_hint: TokenType | None = None
    credentials: ClientCredentialsIn = field(default_factory=ClientCredentialsIn)


@dataclass(frozen=True, slots=True)
class IntrospectionOut:
    """
    RFC 7662 §2.2 response.

    :param active: Whether the token is currently active.
    :param claims: Additional members; always empty when ``active`` is ``False``.
    """

    active: bool
    claims: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def inactive(cls) -> IntrospectionOut:
        return cls(active=False)

    def to_dict(self) -> dict[str, Any]:
        if not self.active:
            return {"active": False}
        body: dict[str, Any] = {"active": True}
        body.update({k: v for k, v in self.claims.items() if v is not None})
        return body
