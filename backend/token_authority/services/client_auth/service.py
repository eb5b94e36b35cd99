# token_authority/services/client_auth/service.py
"""
OAuth 2.0 client authentication (RFC 6749 §2.3).

Credentials come from the HTTP Basic ``Authorization`` header or from the
``client_id``/``client_secret`` form fields. When a Basic header is present it
wins and the form fields are ignored entirely.
"""

from __future__ import annotations

import base64
import binascii
import logging
from urllib.parse import unquote_plus

from token_authority.core.security import verify_client_secret
from token_authority.models.oauth_client import OAuthClient
from token_authority.repositories.oauth_client import OAuthClientRepository
from token_authority.services._shared.errors import (
    ClientMisconfiguredError,
    InvalidClientError,
    InvalidRequestError,
)
from token_authority.services._shared.ports.clock import Clock, SystemClock
from token_authority.services.client_auth.dto import AuthenticatedClient, ClientCredentialsIn

log = logging.getLogger(__name__)

BASIC_SCHEME = "basic"


def parse_basic_authorization(header: str | None) -> tuple[str, str | None] | None:
    """
    Decode an HTTP Basic ``Authorization`` header into ``(client_id, secret)``.

    Both halves are form-url-decoded as RFC 6749 §2.3.1 requires. An empty
    secret is returned as ``None``.

    :param header: Raw header value.
    :returns: ``None`` when the header is absent or uses another scheme.
    :raises InvalidClientError: If the header says ``Basic`` but cannot be decoded.
    """
    if not header:
        return None
    scheme, _, credentials = header.strip().partition(" ")
    if scheme.lower() != BASIC_SCHEME:
        return None

    try:
        decoded = base64.b64decode(credentials.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        raise InvalidClientError(reason="malformed_basic_header", used_basic=True) from None
    if ":" not in decoded:
        raise InvalidClientError(reason="malformed_basic_header", used_basic=True)

    raw_id, _, raw_secret = decoded.partition(":")
    client_id = unquote_plus(raw_id)
    if not client_id:
        raise InvalidClientError(reason="missing_client_id", used_basic=True)
    secret = unquote_plus(raw_secret)
    return client_id, secret or None


class ClientAuthenticator:
    """
    Resolve and validate the calling client.

    Rules
    -----
    * Unknown and inactive clients fail identically (``invalid_client``).
    * Confidential clients must present their secret; it is checked in
      constant time against the stored hash.
    * A confidential secret past its ``client_secret_expires_at`` no longer
      authenticates, even when it matches.
    * Public clients identify themselves by ``client_id`` alone. Sending any
      secret is rejected with ``invalid_request`` rather than ignored.

    The authenticator runs inside the caller's Unit of Work and only reads.
    """

    def __init__(self, clients: OAuthClientRepository, clock: Clock | None = None) -> None:
        self.clients = clients
        self.clock = clock or SystemClock()

    def authenticate(self, creds: ClientCredentialsIn) -> AuthenticatedClient:
        """
        Authenticate ``creds``.

        :returns: The authenticated client.
        :raises InvalidClientError: Bad, missing or unknown credentials (401).
        :raises InvalidRequestError: A public client sent a secret (400).
        :raises ClientMisconfiguredError: A confidential client has no stored secret.
        """
        basic = parse_basic_authorization(creds.authorization)
        used_basic = basic is not None
        if basic is not None:
            client_id, secret = basic
        else:
            client_id = creds.client_id or None
            secret = creds.client_secret or None

        if not client_id:
            raise self._fail("missing_client_id", used_basic)

        client = self.clients.get_by_client_id(client_id)
        if client is None or not client.is_active:
            raise self._fail("unknown_or_inactive_client", used_basic, client_id)

        if client.is_confidential:
            self._check_secret(client, secret, used_basic)
        elif secret is not None:
            log.warning(
                "Public client sent a client_secret",
                extra={"event": "oauth.client_auth.failed", "client_id": client_id, "reason": "public_with_secret"},
            )
            raise InvalidRequestError("Public clients must not send a client_secret")

        return AuthenticatedClient(id=client.id, client_id=client.client_id, client_type=client.client_type)

    def _check_secret(self, client: OAuthClient, secret: str | None, used_basic: bool) -> None:
        if secret is None:
            raise self._fail("missing_secret", used_basic, client.client_id)
        if not client.client_secret_hash:
            log.error(
                "Confidential client has no secret hash configured",
                extra={"event": "oauth.client_auth.misconfigured", "client_id": client.client_id},
            )
            raise ClientMisconfiguredError("Client is misconfigured")
        if not verify_client_secret(client.client_secret_hash, secret):
            raise self._fail("wrong_secret", used_basic, client.client_id)
        if client.secret_expired(self.clock.now()):
            raise self._fail("secret_expired", used_basic, client.client_id)

    @staticmethod
    def _fail(reason: str, used_basic: bool, client_id: str | None = None) -> InvalidClientError:
        log.warning(
            "Client authentication failed",
            extra={"event": "oauth.client_auth.failed", "client_id": client_id, "reason": reason},
        )
        return InvalidClientError(reason=reason, used_basic=used_basic)
