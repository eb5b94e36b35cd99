# token_authority/infra/jwt/flask_jwt_token_verifier.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import jwt
from flask_jwt_extended import decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from token_authority.core.security import hash_token
from token_authority.services._shared.ports import TokenVerifier, VerificationResult

log = logging.getLogger(__name__)

# Flask-JWT-Extended writes "type": "access" | "refresh"
ACCESS_TYPE = "access"
REFRESH_TYPE = "refresh"


@dataclass(slots=True)
class JWTTokenVerifier(TokenVerifier):
    """
    Adapter for Flask-JWT-Extended.

    Signature, ``exp``/``nbf``, issuer and audience are checked by
    :func:`flask_jwt_extended.decode_token` against ``JWT_ALGORITHM``,
    ``JWT_SECRET_KEY``/``JWT_PUBLIC_KEY``, ``JWT_DECODE_ISSUER`` and
    ``JWT_DECODE_AUDIENCE``. Only token-decoding errors are turned into an
    invalid result; configuration errors propagate.

    .. note::
       Requires an active Flask app context with proper JWT settings.
    """

    def verify_access_token(self, raw: str) -> VerificationResult:
        return self._verify(raw, ACCESS_TYPE)

    def verify_refresh_token(self, raw: str) -> VerificationResult:
        return self._verify(raw, REFRESH_TYPE)

    def get_token_hash(self, raw: str) -> str:
        return hash_token(raw)

    def read_jti(self, raw: str) -> str | None:
        # Unverified on purpose: only used to key the blacklist for a token
        # whose store row was already matched by hash.
        try:
            claims = jwt.decode(raw, options={"verify_signature": False})
        except PyJWTError:
            return None
        jti = claims.get("jti")
        return jti if isinstance(jti, str) and jti else None

    def _verify(self, raw: str, expected_type: str) -> VerificationResult:
        if not isinstance(raw, str) or not raw:
            return VerificationResult.invalid()
        try:
            payload: dict[str, Any] = decode_token(raw)
        except (PyJWTError, JWTExtendedException) as exc:
            log.debug("Token rejected: %s", type(exc).__name__, extra={"reason": type(exc).__name__})
            return VerificationResult.invalid()

        if self._token_kind(payload) != expected_type:
            log.debug("Token rejected: wrong type", extra={"reason": "wrong_type"})
            return VerificationResult.invalid()
        return VerificationResult.ok(payload)

    @staticmethod
    def _token_kind(payload: dict[str, Any]) -> str:
        # Tokens minted elsewhere may mark refresh tokens with "token_type"
        # instead; Flask-JWT-Extended then defaults "type" to "access".
        if payload.get("token_type") == REFRESH_TYPE:
            return REFRESH_TYPE
        return str(payload.get("type", ACCESS_TYPE))
