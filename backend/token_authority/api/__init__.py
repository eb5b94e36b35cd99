"""API blueprint package: versioned JSON routes plus the OAuth 2.0 endpoints."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask

OAUTH_PREFIX = "/oauth"


def register_blueprint_group(
    app: Flask,
    *,
    base_prefix: str,
    entries: Iterable[tuple[Blueprint, str]],
) -> None:
    """Register related blueprints beneath a common prefix.

    Parameters
    ----------
    app:
        Application instance receiving the blueprints.
    base_prefix:
        Prefix applied to all entries, such as ``"/api/v1"`` or ``"/oauth"``.
    entries:
        Iterable of ``(blueprint, relative_prefix)`` pairs where
        ``relative_prefix`` is appended to ``base_prefix``.
    """

    for bp, rel_prefix in entries:
        full_prefix = "/".join(
            segment for segment in [base_prefix.rstrip("/"), rel_prefix.strip("/")] if segment
        )
        full_prefix = "/" + full_prefix if not full_prefix.startswith("/") else full_prefix
        app.register_blueprint(bp, url_prefix=full_prefix)


def init_app(app: Flask) -> None:
    """Register the OAuth endpoints and the available API versions."""

    api_base = app.config.get("API_BASE_PREFIX", "/api")

    from token_authority.api.oauth import bp as oauth_bp
    from token_authority.api.v1 import API_VERSION as V1
    from token_authority.api.v1 import REGISTRY as V1_REGISTRY

    # RFC 7662 / RFC 7009 paths are fixed and live outside the versioned API.
    register_blueprint_group(app, base_prefix=OAUTH_PREFIX, entries=[(oauth_bp, "")])
    register_blueprint_group(app, base_prefix=f"{api_base}/{V1}", entries=V1_REGISTRY)


__all__ = ["init_app", "register_blueprint_group"]
