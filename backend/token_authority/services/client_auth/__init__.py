from .dto import AuthenticatedClient, ClientCredentialsIn
from .service import ClientAuthenticator

__all__ = ["AuthenticatedClient", "ClientAuthenticator", "ClientCredentialsIn"]
