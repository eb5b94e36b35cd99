# token_authority/services/client_auth/dto.py
from __future__ import annotations

from dataclasses import dataclass

from token_authority.models.oauth_client import ClientType

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class ClientCredentialsIn:
    """
    Raw client credentials as received by an OAuth endpoint.

    :param authorization: Value of the ``Authorization`` header, if any.
    :type authorization: str | None
    :param client_id: ``client_id`` form field, if any.
    :type client_id: str | None
    :param client_secret: ``client_secret`` form field, if any.
    :type client_secret: str | None
    """

    authorization: str | None = None
    client_id: str | None = None
    client_secret: str | None = None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthenticatedClient:
    """
    The client that passed authentication.

    Detached from the ORM so it remains usable after the Unit of Work ends.

    :param id: Primary key, used to match token ownership.
    :param client_id: Public identifier.
    :param client_type: Confidential or public.
    """

    id: int
    client_id: str
    client_type: ClientType
