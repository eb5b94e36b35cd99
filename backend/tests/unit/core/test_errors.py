from __future__ import annotations

import pytest
from marshmallow import ValidationError

from token_authority.core.errors import (
    NO_STORE_HEADERS,
    OAuth2Error,
    OAuth2ErrorType,
    describe_validation_error,
    oauth_error_response,
)


@pytest.mark.parametrize(
    ("error", "status"),
    [
        (OAuth2ErrorType.INVALID_REQUEST, 400),
        (OAuth2ErrorType.INVALID_CLIENT, 401),
        (OAuth2ErrorType.UNSUPPORTED_TOKEN_TYPE, 400),
        (OAuth2ErrorType.SERVER_ERROR, 500),
        (OAuth2ErrorType.TEMPORARILY_UNAVAILABLE, 503),
    ],
)
def test_error_types_carry_default_status(error, status):
    assert OAuth2Error(error).status_code == status


def test_oauth_error_body_and_overrides():
    err = OAuth2Error(OAuth2ErrorType.INVALID_CLIENT, "nope", headers={"WWW-Authenticate": 'Basic realm="x"'})
    assert err.to_body() == {"error": "invalid_client", "error_description": "nope"}
    assert err.headers["WWW-Authenticate"] == 'Basic realm="x"'

    custom = OAuth2Error(OAuth2ErrorType.INVALID_REQUEST, status_code=415)
    assert custom.status_code == 415
    assert custom.message == OAuth2ErrorType.INVALID_REQUEST.default_description


def test_oauth_error_response_is_not_cacheable(app):
    with app.test_request_context():
        resp, status = oauth_error_response(OAuth2Error(OAuth2ErrorType.SERVER_ERROR))
    assert status == 500
    for header, value in NO_STORE_HEADERS.items():
        assert resp.headers[header] == value
    assert resp.get_json()["error"] == "server_error"


def test_describe_validation_error_flattens_messages():
    err = ValidationError({"token": ["Missing data for required field."], "token_type_hint": ["Unsupported."]})
    text = describe_validation_error(err)
    assert text == "token: Missing data for required field.; token_type_hint: Unsupported."
