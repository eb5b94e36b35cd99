"""Unit tests for the User model validators."""

from __future__ import annotations

import pytest

from token_authority.models.user import User


def test_username_is_trimmed():
    user = User(id="u-1", username="  alice ")

    assert user.username == "alice"


@pytest.mark.parametrize("username", ["", "   "])
def test_blank_username_is_rejected(username):
    with pytest.raises(ValueError, match="Username is required"):
        User(id="u-1", username=username)


def test_only_introspection_fields_are_mapped():
    assert set(User.__table__.columns.keys()) == {"id", "username", "created_at", "updated_at"}
