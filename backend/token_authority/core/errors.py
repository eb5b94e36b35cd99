"""Centralized error handling.

Two wire formats coexist:

* RFC 6749 ``{"error", "error_description"}`` bodies for the OAuth endpoints,
  built by :func:`oauth_error_response` from an :class:`OAuth2ErrorType`.
* RFC 7807 ``application/problem+json`` for everything else.
"""

from __future__ import annotations

import logging
from enum import Enum
from http import HTTPStatus
from typing import Any

from flask import Blueprint, Flask, Response, jsonify, request
from marshmallow import ValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from token_authority.core.logger import ensure_request_id

log = logging.getLogger(__name__)

NO_STORE_HEADERS = {"Cache-Control": "no-store", "Pragma": "no-cache"}


# ---------------------------------------------------------------------------
# OAuth 2.0 errors
# ---------------------------------------------------------------------------


class OAuth2ErrorType(str, Enum):
    """Error codes defined by RFC 6749 §5.2, RFC 7009 §2.2.1 and RFC 6750."""

    INVALID_REQUEST = "invalid_request"
    INVALID_CLIENT = "invalid_client"
    INVALID_GRANT = "invalid_grant"
    UNAUTHORIZED_CLIENT = "unauthorized_client"
    UNSUPPORTED_GRANT_TYPE = "unsupported_grant_type"
    INVALID_SCOPE = "invalid_scope"
    ACCESS_DENIED = "access_denied"
    UNSUPPORTED_RESPONSE_TYPE = "unsupported_response_type"
    UNSUPPORTED_TOKEN_TYPE = "unsupported_token_type"
    SERVER_ERROR = "server_error"
    TEMPORARILY_UNAVAILABLE = "temporarily_unavailable"

    @property
    def default_status(self) -> int:
        return _DEFAULT_STATUS.get(self, HTTPStatus.BAD_REQUEST)

    @property
    def default_description(self) -> str:
        return _DEFAULT_DESCRIPTION[self]


_DEFAULT_STATUS: dict[OAuth2ErrorType, int] = {
    OAuth2ErrorType.INVALID_CLIENT: HTTPStatus.UNAUTHORIZED,
    OAuth2ErrorType.ACCESS_DENIED: HTTPStatus.FORBIDDEN,
    OAuth2ErrorType.SERVER_ERROR: HTTPStatus.INTERNAL_SERVER_ERROR,
    OAuth2ErrorType.TEMPORARILY_UNAVAILABLE: HTTPStatus.SERVICE_UNAVAILABLE,
}

_DEFAULT_DESCRIPTION: dict[OAuth2ErrorType, str] = {
    OAuth2ErrorType.INVALID_REQUEST: "The request is missing a required parameter or is otherwise malformed",
    OAuth2ErrorType.INVALID_CLIENT: "Client authentication failed",
    OAuth2ErrorType.INVALID_GRANT: "The provided grant is invalid, expired or revoked",
    OAuth2ErrorType.UNAUTHORIZED_CLIENT: "The client is not authorized to use this grant type",
    OAuth2ErrorType.UNSUPPORTED_GRANT_TYPE: "The grant type is not supported",
    OAuth2ErrorType.INVALID_SCOPE: "The requested scope is invalid or unknown",
    OAuth2ErrorType.ACCESS_DENIED: "The resource owner or server denied the request",
    OAuth2ErrorType.UNSUPPORTED_RESPONSE_TYPE: "The response type is not supported",
    OAuth2ErrorType.UNSUPPORTED_TOKEN_TYPE: "The token type is not supported",
    OAuth2ErrorType.SERVER_ERROR: "The server encountered an unexpected condition",
    OAuth2ErrorType.TEMPORARILY_UNAVAILABLE: "The server is temporarily unable to handle the request",
}


class APIError(Exception):
    """
    Represent a JSON-serializable API error.

    Parameters
    ----------
    message : str
        Human-readable description presented to clients.
    status_code : int, optional
        HTTP status code to return. Defaults to ``400``.
    code : str, optional
        Machine-readable identifier, typically snake_case. Defaults to
        ``"bad_request"``.
    details : dict[str, Any] | None, optional
        Optional structured payload included in the response body.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "bad_request",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.details = details or {}

    def to_problem(self) -> dict[str, Any]:
        """
        Serialize error metadata into an RFC 7807 problem.

        :returns: Problem details dictionary.
        :rtype: dict
        """
        return _as_problem(
            status=self.status_code,
            code=self.code,
            message=self.message,
            details=self.details or None,
        )


class OAuth2Error(APIError):
    """
    An error reported with the RFC 6749 ``{error, error_description}`` body.

    Parameters
    ----------
    error : OAuth2ErrorType
        Protocol error code. Also selects the default status and description.
    description : str | None, optional
        Human-readable text safe to show to the client.
    status_code : int | None, optional
        Overrides the status implied by ``error``.
    headers : dict[str, str] | None, optional
        Extra response headers such as ``WWW-Authenticate``.
    """

    def __init__(
        self,
        error: OAuth2ErrorType,
        description: str | None = None,
        *,
        status_code: int | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(
            description or error.default_description,
            status_code=status_code or error.default_status,
            code=error.value,
        )
        self.error = error
        self.headers = dict(headers or {})

    def to_body(self) -> dict[str, str]:
        return {"error": self.error.value, "error_description": self.message}


def oauth_error_response(err: OAuth2Error) -> tuple[Response, int]:
    """Render ``err`` as a non-cacheable RFC 6749 JSON response."""
    resp = jsonify(err.to_body())
    resp.headers.update(NO_STORE_HEADERS)
    resp.headers.update(err.headers)
    return resp, err.status_code


def register_oauth_error_handlers(bp: Blueprint) -> None:
    """
    Attach RFC 6749 error handlers to an OAuth blueprint.

    Expected negatives (4xx) are logged as warnings without tracebacks. Any
    other exception is an infrastructure failure: it is logged with
    ``exc_info`` and answered with ``500 server_error`` so that it can never be
    mistaken for an inactive or unknown token.
    """

    @bp.errorhandler(OAuth2Error)
    def _handle_oauth_error(err: OAuth2Error):
        level = log.error if err.status_code >= 500 else log.warning
        level(
            "OAuth2Error: error=%s status=%s msg=%s",
            err.error.value,
            err.status_code,
            err.message,
            extra={"event": "oauth.error", "reason": err.error.value},
        )
        return oauth_error_response(err)

    @bp.errorhandler(ValidationError)
    def _handle_validation_error(err: ValidationError):
        return _handle_oauth_error(OAuth2Error(OAuth2ErrorType.INVALID_REQUEST, describe_validation_error(err)))

    @bp.errorhandler(HTTPException)
    def _handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        error = OAuth2ErrorType.SERVER_ERROR if status >= 500 else OAuth2ErrorType.INVALID_REQUEST
        message = (err.description or HTTPStatus(status).phrase).strip()
        return _handle_oauth_error(OAuth2Error(error, message, status_code=status))

    @bp.errorhandler(Exception)
    def _handle_infrastructure_failure(err: Exception):
        log.error(
            "Unhandled exception on OAuth endpoint: %s",
            type(err).__name__,
            exc_info=True,
            extra={"event": "oauth.infrastructure_failure"},
        )
        return oauth_error_response(OAuth2Error(OAuth2ErrorType.SERVER_ERROR))


def describe_validation_error(err: ValidationError) -> str:
    """Flatten marshmallow messages into one client-safe sentence."""
    messages = err.normalized_messages()
    parts = []
    for field, problems in sorted(messages.items()):
        if isinstance(problems, list):
            text = " ".join(str(p) for p in problems)
        else:
            text = str(problems)
        parts.append(f"{field}: {text}")
    return "; ".join(parts) or "Invalid request"


# ---------------------------------------------------------------------------
# RFC 7807 problem details (non-OAuth routes)
# ---------------------------------------------------------------------------


def _http_status_to_code(status_code: int) -> str:
    """Map common HTTP status codes to canonical, stable error codes."""
    mapping = {
        400: "bad_request",
        401: "unauthorized",
        403: "forbidden",
        404: "not_found",
        405: "method_not_allowed",
        409: "conflict",
        415: "unsupported_media_type",
        422: "unprocessable_entity",
        429: "too_many_requests",
        500: "internal_server_error",
        503: "service_unavailable",
    }
    return mapping.get(status_code, "error")


def _as_problem(
    *,
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build an RFC 7807 Problem Details dict.

    :param status: HTTP status code.
    :param code: Stable machine-consumable error code.
    :param message: Human-readable error summary (safe for clients).
    :param details: Optional safe, structured details.
    :returns: Problem+JSON dictionary.
    :rtype: dict
    """
    problem = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": status,
        "detail": message,
        "instance": request.path if request else None,
        "code": code,
    }
    if details:
        problem["details"] = details
    problem["request_id"] = ensure_request_id()
    return problem


def _problem_response(problem: dict[str, Any]) -> Response:
    """Return a Flask response with ``application/problem+json`` media type."""
    resp = jsonify(problem)
    resp.mimetype = "application/problem+json"
    return resp


def init_app(app: Flask) -> None:
    """
    Attach RFC 7807 error handlers to the Flask app.

    Notes
    -----
    - OAuth blueprints register their own handlers, which take precedence.
    - Ensures a correlation ``request_id`` is present on every error.
    - Emits 5xx with ``exc_info`` for traceability; 4xx as warnings.
    """

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        if isinstance(err, OAuth2Error):
            return oauth_error_response(err)
        problem = err.to_problem()
        level = log.error if err.status_code >= 500 else log.warning
        level("APIError: code=%s status=%s msg=%s", err.code, err.status_code, err.message)
        return _problem_response(problem), err.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        error_code = _http_status_to_code(status)
        message = (err.description or error_code.replace("_", " ").capitalize()).strip()
        if status == HTTPStatus.NOT_FOUND and request:
            message = f"Route '{request.path}' not found"
        problem = _as_problem(status=status, code=error_code, message=message)
        level = log.error if status >= 500 else log.warning
        level("HTTPException: code=%s status=%s detail=%s", error_code, status, message)
        return _problem_response(problem), status

    @app.errorhandler(ValidationError)
    def handle_validation_error(err: ValidationError):
        problem = _as_problem(
            status=HTTPStatus.UNPROCESSABLE_ENTITY,
            code="validation_error",
            message="Validation failed",
            details={"errors": err.normalized_messages()},
        )
        log.warning("ValidationError on %s", request.path)
        return _problem_response(problem), HTTPStatus.UNPROCESSABLE_ENTITY

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        # Do not leak raw DB error to clients
        problem = _as_problem(status=HTTPStatus.CONFLICT, code="conflict", message="Resource conflict")
        log.error("IntegrityError on %s", request.path, exc_info=True)
        return _problem_response(problem), HTTPStatus.CONFLICT

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        problem = _as_problem(
            status=HTTPStatus.SERVICE_UNAVAILABLE,
            code="service_unavailable",
            message="Service temporarily unavailable",
        )
        log.error("OperationalError on %s", request.path, exc_info=True)
        return _problem_response(problem), HTTPStatus.SERVICE_UNAVAILABLE

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        # Unexpected server-side error; never leak internal details
        problem = _as_problem(
            status=HTTPStatus.INTERNAL_SERVER_ERROR,
            code="internal_server_error",
            message="Unexpected error",
        )
        log.error("Unhandled exception on %s", request.path, exc_info=True)
        return _problem_response(problem), HTTPStatus.INTERNAL_SERVER_ERROR
