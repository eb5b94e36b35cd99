"""Hashing helpers for token lookup keys and client secrets."""

from __future__ import annotations

import hashlib
import secrets

from werkzeug.security import check_password_hash, generate_password_hash

# Length in bytes of generated client secrets before url-safe encoding.
CLIENT_SECRET_BYTES = 32


def hash_token(raw_token: str) -> str:
    """Return the SHA-256 hex digest used as the store lookup key of ``raw_token``.

    The digest is deterministic so the same token always maps to the same row,
    and one-way so a leaked table never yields a usable bearer token.
    """
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def hash_client_secret(secret: str) -> str:
    """Hash a client secret for storage."""
    return generate_password_hash(secret)


def verify_client_secret(secret_hash: str, candidate: str) -> bool:
    """Compare ``candidate`` against ``secret_hash`` in constant time.

    Werkzeug recomputes the salted hash and compares it with
    :func:`hmac.compare_digest`.
    """
    return check_password_hash(secret_hash, candidate)


def generate_client_secret() -> str:
    """Generate a random client secret suitable for confidential clients."""
    return secrets.token_urlsafe(CLIENT_SECRET_BYTES)


def hash_prefix(token_hash: str, length: int = 10) -> str:
    """Return the first ``length`` characters of a token hash for logs and audit."""
    return token_hash[: max(0, length)]
