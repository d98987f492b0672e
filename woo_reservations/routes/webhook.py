from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from ..services import order_webhook_service

blueprint = Blueprint("webhook", __name__)


@blueprint.post("/")
@blueprint.post("/webhook")
@blueprint.post("/webhook/")
def receive_order():
    config = current_app.config["APP_CONFIG"]
    outcome = order_webhook_service.handle_webhook(request.get_data(), request.args.get("site"), config)
    return jsonify(outcome.to_dict()), outcome.http_status(config.response_mode)
