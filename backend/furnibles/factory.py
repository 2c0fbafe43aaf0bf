"""Application factory wiring Flask extensions, guards and blueprints."""

from __future__ import annotations

from flask import Flask

from furnibles.core.config import BaseConfig, get_config
from furnibles.core.logger import configure_logging, init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    Order matters: the revocation gate is installed after the API blueprints
    so that it can resolve the public-endpoint registry, and before error
    handlers so that its ``Unauthorized`` is rendered as a problem document.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    from furnibles.core import proxy

    proxy.init_app(app)

    from furnibles.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from furnibles.core import cors

    cors.init_app(app)

    from furnibles.api import init_app as init_api

    init_api(app)

    from furnibles.api.revocation import init_app as init_revocation_gate

    init_revocation_gate(app)

    from furnibles.core import errors

    errors.init_app(app)

    from furnibles import cli as app_cli

    app_cli.init_app(app)

    return app
