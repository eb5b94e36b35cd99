from __future__ import annotations

import hashlib
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True, slots=True)
class VerificationResult:
    """
    Outcome of verifying a token.

    :param valid: ``True`` when signature, expiry, issuer, audience and token
        type all checked out.
    :param payload: Verified claims; ``None`` when ``valid`` is ``False``.
    """

    valid: bool
    payload: Mapping[str, Any] | None = None

    @classmethod
    def invalid(cls) -> VerificationResult:
        return cls(valid=False, payload=None)

    @classmethod
    def ok(cls, payload: Mapping[str, Any]) -> VerificationResult:
        return cls(valid=True, payload=dict(payload))


class TokenVerifier(Protocol):
    """
    Port for verifying presented tokens and deriving their store key.

    Implementations must never raise on malformed or hostile input; they
    return :meth:`VerificationResult.invalid` instead. Configuration and
    infrastructure faults, on the other hand, must propagate.
    """

    def verify_access_token(self, raw: str) -> VerificationResult: ...

    def verify_refresh_token(self, raw: str) -> VerificationResult: ...

    def get_token_hash(self, raw: str) -> str: ...

    def read_jti(self, raw: str) -> str | None:
        """Return the ``jti`` claim without verifying the token, or ``None``."""
        ...


class StubTokenVerifier(TokenVerifier):
    """Deterministic verifier used in unit tests.

    Tokens are opaque strings registered with :meth:`issue`; anything else is
    invalid. Hashing matches the production SHA-256 lookup key.
    """

    def __init__(self) -> None:
        self._seq = 0
        self._issued: dict[str, tuple[str, dict[str, Any]]] = {}

    def issue(self, kind: str, **claims: Any) -> str:
        """Register a token of ``kind`` (``"access"`` or ``"refresh"``) carrying ``claims``."""
        self._seq += 1
        raw = f"{kind}.{claims.get('jti', 'nojti')}.{self._seq}"
        self._issued[raw] = (kind, dict(claims))
        return raw

    def verify_access_token(self, raw: str) -> VerificationResult:
        return self._verify(raw, "access")

    def verify_refresh_token(self, raw: str) -> VerificationResult:
        return self._verify(raw, "refresh")

    def get_token_hash(self, raw: str) -> str:
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()

    def read_jti(self, raw: str) -> str | None:
        issued = self._issued.get(raw)
        return issued[1].get("jti") if issued else None

    def _verify(self, raw: str, kind: str) -> VerificationResult:
        issued = self._issued.get(raw)
        if issued is None or issued[0] != kind:
            return VerificationResult.invalid()
        return VerificationResult.ok(issued[1])
