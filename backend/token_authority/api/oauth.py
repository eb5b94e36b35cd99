"""OAuth 2.0 token introspection (RFC 7662) and revocation (RFC 7009) endpoints."""

from __future__ import annotations

from flask import Blueprint, Response, request

from token_authority.api.deps import (
    client_credentials,
    client_ip,
    client_user_agent,
    introspection_service,
    json_response,
    no_store,
    require_form_urlencoded,
    revocation_service,
    timing,
    translate_oauth_errors,
)
from token_authority.core.errors import register_oauth_error_handlers
from token_authority.schemas import (
    IntrospectionRequestSchema,
    IntrospectionResponseSchema,
    RevocationRequestSchema,
)
from token_authority.services.introspection import IntrospectIn
from token_authority.services.revocation import RevokeIn

bp = Blueprint("oauth", __name__)
register_oauth_error_handlers(bp)

introspection_request_schema = IntrospectionRequestSchema()
introspection_response_schema = IntrospectionResponseSchema()
revocation_request_schema = RevocationRequestSchema()


@bp.post("/introspect")
@timing
@require_form_urlencoded
@translate_oauth_errors
def introspect():
    """Report whether a token is active. Token problems never become HTTP errors."""

    data = introspection_request_schema.load(request.form)
    result = introspection_service().introspect(
        IntrospectIn(
            token=data["token"],
            token_type_hint=data["token_type_hint"],
            credentials=client_credentials(),
        )
    )
    return no_store(json_response(introspection_response_schema.dump(result.to_dict())))


@bp.post("/revoke")
@timing
@require_form_urlencoded
@translate_oauth_errors
def revoke():
    """Revoke a token. Any outcome after client authentication is an empty 200."""

    service = revocation_service()
    client = service.authenticate(client_credentials())
    data = revocation_request_schema.load(request.form)
    service.revoke(
        RevokeIn(
            token=data["token"],
            token_type_hint=data["token_type_hint"],
            ip=client_ip(),
            user_agent=client_user_agent(),
        ),
        client,
    )
    return no_store(Response(status=200))
