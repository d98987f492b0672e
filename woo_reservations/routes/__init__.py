from __future__ import annotations

from flask import Flask
from flask_cors import CORS

from . import system, webhook


def register_blueprints(app: Flask, config) -> None:
    origins = config.cors_allow_list or ["*"]
    CORS(app, resources={r"/*": {"origins": "*" if "*" in origins else origins}})

    app.register_blueprint(webhook.blueprint)
    app.register_blueprint(system.blueprint)
