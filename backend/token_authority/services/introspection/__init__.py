from .dto import IntrospectIn, IntrospectionOut
from .service import IntrospectionService

__all__ = ["IntrospectIn", "IntrospectionOut", "IntrospectionService"]
