from .dto import RevocationResult, RevokeIn
from .service import RevocationService

__all__ = ["RevocationResult", "RevocationService", "RevokeIn"]
