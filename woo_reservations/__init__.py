from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:  # pragma: no cover
    from flask import Flask

    from .config import AppConfig


def create_app(config: Optional["AppConfig"] = None) -> "Flask":
    """
    Application factory used by local development, WSGI servers and tests.
    """
    from .config import load_config
    from .logging_config import configure_logging
    from .middleware.request_logging import init_request_logging
    from .routes import register_blueprints
    from .services import configure_services

    if config is None:
        config = load_config()
        configure_logging(config)

    from flask import Flask

    app = Flask(__name__)
    app.config.update(config.flask_settings)
    app.config["PORT"] = config.port
    app.config["DEBUG"] = not config.is_production
    app.config["APP_CONFIG"] = config

    configure_services(config)

    init_request_logging(app)
    register_blueprints(app, config)

    return app
