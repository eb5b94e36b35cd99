"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, jsonify, request
from werkzeug.exceptions import UnsupportedMediaType

from token_authority.core.errors import NO_STORE_HEADERS
from token_authority.core.extensions import get_redis
from token_authority.infra.audit.sqlalchemy_audit_sink import SQLAlchemyAuditSink
from token_authority.infra.jwt.flask_jwt_token_verifier import JWTTokenVerifier
from token_authority.infra.redis.redis_revocation_cache import RedisRevocationCache
from token_authority.services._shared.base import BaseService
from token_authority.services._shared.errors import ServiceError
from token_authority.services._shared.ports import NullRevocationCache, RevocationCache
from token_authority.services.client_auth import ClientCredentialsIn
from token_authority.services.introspection import IntrospectionService
from token_authority.services.revocation import RevocationService

F = TypeVar("F", bound=Callable[..., Any])

FORM_MIMETYPE = "application/x-www-form-urlencoded"


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def no_store(response: Response) -> Response:
    """Mark ``response`` as non-cacheable (RFC 6749 §5.1)."""

    response.headers.update(NO_STORE_HEADERS)
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]


def require_form_urlencoded(func: F) -> F:
    """Reject bodies that are not ``application/x-www-form-urlencoded`` with 415."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        if request.mimetype != FORM_MIMETYPE:
            raise UnsupportedMediaType(f"Content-Type must be {FORM_MIMETYPE}")
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def translate_oauth_errors(func: F) -> F:
    """Re-raise service errors as OAuth 2.0 errors for the blueprint handlers."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        try:
            return func(*args, **kwargs)
        except ServiceError as exc:
            realm = current_app.config.get("OAUTH_REALM", "token-authority")
            raise BaseService.translate_exceptions(exc, realm=realm) from exc

    return wrapper  # type: ignore[return-value]


def client_credentials() -> ClientCredentialsIn:
    """Collect client credentials from the ``Authorization`` header and the form."""

    return ClientCredentialsIn(
        authorization=request.headers.get("Authorization"),
        client_id=request.form.get("client_id") or None,
        client_secret=request.form.get("client_secret") or None,
    )


def client_ip() -> str | None:
    """Caller address; ``ProxyFix`` has already applied ``X-Forwarded-For``."""

    return request.remote_addr


def client_user_agent() -> str | None:
    return request.user_agent.string or None


# --------------------------- Service builders ------------------------------ #


def revocation_cache() -> RevocationCache:
    """Redis-backed cache when ``REDIS_URL`` is configured, otherwise a no-op."""

    r = get_redis()
    if r is None:
        return NullRevocationCache()
    return RedisRevocationCache(r)


def introspection_service() -> IntrospectionService:
    return IntrospectionService(
        verifier=JWTTokenVerifier(),
        cache=revocation_cache(),
        own_tokens_only=bool(current_app.config.get("INTROSPECT_OWN_TOKENS_ONLY", False)),
    )


def revocation_service() -> RevocationService:
    return RevocationService(
        verifier=JWTTokenVerifier(),
        audit_sink=SQLAlchemyAuditSink(),
        cache=revocation_cache(),
        hash_prefix_length=int(current_app.config.get("AUDIT_TOKEN_HASH_PREFIX_LENGTH", 10)),
    )
