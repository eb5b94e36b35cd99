"""
Service-level exceptions.

These exceptions are **framework-agnostic**: they never import Flask or HTTP
types. Each carries the OAuth 2.0 error code it represents so that the API
layer can translate it with :meth:`BaseService.translate_exceptions` without
guessing.

Token-state outcomes (expired, unknown, revoked, foreign) are
*not* exceptions: introspection reports them as ``active: false`` and
revocation answers them with a plain ``200``.
"""

from __future__ import annotations


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    :param message: Client-safe description.
    """

    oauth_error = "invalid_request"

    def __init__(self, message: str = "Invalid request") -> None:
        super().__init__(message)
        self.message = message


class InvalidRequestError(ServiceError):
    """Malformed request, or a public client that sent a ``client_secret``."""

    oauth_error = "invalid_request"


class InvalidClientError(ServiceError):
    """
    Client authentication failed.

    :param message: Client-safe description. Unknown, inactive and
        wrong-secret clients share the same text.
    :param reason: Internal reason code for logs only.
    :param used_basic: Whether the client attempted HTTP Basic authentication,
        which obliges a ``WWW-Authenticate`` challenge on the response.
    """

    oauth_error = "invalid_client"

    def __init__(
        self,
        message: str = "Client authentication failed",
        *,
        reason: str = "invalid_client",
        used_basic: bool = False,
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.used_basic = used_basic


class ClientMisconfiguredError(ServiceError):
    """A confidential client has no stored secret hash; this is a server fault."""

    oauth_error = "server_error"
