"""Expose the application factory at package level.

Provide convenient access to :func:`token_authority.factory.create_app` so
callers (Gunicorn, the Flask CLI, tests) can ``from token_authority import
create_app`` without traversing the package structure.
"""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]
