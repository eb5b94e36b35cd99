"""Application factory wiring Flask extensions and blueprints."""

from __future__ import annotations

from flask import Flask

from token_authority.core.config import BaseConfig, get_config
from token_authority.core.logger import configure_logging, init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the token authority application.

    :param config: Config class, object or import path. ``None`` selects the
        class named by ``APP_ENV``.
    :param instance_relative_config: Load overrides from the instance folder.
    :param instance_config_filename: File name of the instance overrides.
    :return: A fully wired :class:`flask.Flask` instance.
    """
    app = Flask(__name__, instance_relative_config=instance_relative_config)

    config_obj = get_config() if config is None else config
    app.config.from_object(config_obj)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    validate = getattr(config_obj, "validate", None)
    if callable(validate):
        validate(app.config)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"), json_output=app.config.get("LOG_JSON", True))

    from token_authority.core import proxy

    proxy.init_app(app)

    from token_authority.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from token_authority.core import cors

    cors.init_app(app)

    from token_authority.api import init_app as init_api

    init_api(app)

    from token_authority.core import errors

    errors.init_app(app)

    from token_authority import cli as app_cli

    app_cli.init_app(app)

    return app
