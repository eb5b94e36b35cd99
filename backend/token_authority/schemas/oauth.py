"""Form schemas for the OAuth 2.0 introspection and revocation endpoints."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from marshmallow import EXCLUDE, Schema, fields, post_dump, post_load, pre_load, validate

from token_authority.models.token import TokenType

TOKEN_TYPE_HINTS = [t.value for t in TokenType]


class TokenRequestSchema(Schema):
    """
    Body shared by ``/oauth/introspect`` and ``/oauth/revoke``.

    Empty form values count as absent and unknown fields are ignored.
    Client credentials are read separately; they are not validated here.
    """

    class Meta:
        unknown = EXCLUDE

    token = fields.String(required=True, validate=validate.Length(min=1))
    token_type_hint = fields.String(
        load_default=None,
        validate=validate.OneOf(TOKEN_TYPE_HINTS, error="Unsupported token_type_hint."),
    )

    @pre_load
    def drop_empty(self, data: Mapping[str, Any], **_: Any) -> dict[str, Any]:
        return {key: value for key, value in data.items() if value not in (None, "")}

    @post_load
    def to_token_type(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        hint = data.get("token_type_hint")
        data["token_type_hint"] = TokenType(hint) if hint else None
        return data


class IntrospectionRequestSchema(TokenRequestSchema):
    """Input payload for RFC 7662 introspection."""


class RevocationRequestSchema(TokenRequestSchema):
    """Input payload for RFC 7009 revocation."""


class IntrospectionResponseSchema(Schema):
    """RFC 7662 §2.2 response. ``None`` members are left out."""

    active = fields.Boolean(required=True)
    scope = fields.String()
    client_id = fields.String()
    username = fields.String()
    token_type = fields.String()
    exp = fields.Integer()
    iat = fields.Integer()
    nbf = fields.Integer()
    sub = fields.String()
    aud = fields.Raw()
    iss = fields.String()
    jti = fields.String()
    user_id = fields.String()
    permissions = fields.List(fields.String())

    @post_dump
    def drop_none(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        if not data.get("active"):
            return {"active": False}
        return {key: value for key, value in data.items() if value is not None}
