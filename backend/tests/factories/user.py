"""Factory Boy definition for :class:`token_authority.models.user.User`."""

from __future__ import annotations

import factory

from tests.factories import BaseFactory
from token_authority.models.user import User


class UserFactory(BaseFactory):
    """Build persisted resource owners referenced by tokens."""

    class Meta:
        model = User

    id = factory.Sequence(lambda n: f"user-{n}")
    username = factory.Sequence(lambda n: f"user{n}")
