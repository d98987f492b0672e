"""
AWS Lambda entry point for API Gateway proxy events.

Runs the same pipeline as the Flask route. Configuration is loaded once per
container and reused across invocations.
"""
from __future__ import annotations

import base64
import json
import logging
from typing import Any, Dict, Optional

from .config import AppConfig, load_config
from .logging_config import configure_logging
from .services import configure_services, order_webhook_service

logger = logging.getLogger(__name__)

_CONFIG: Optional[AppConfig] = None


def _get_config() -> AppConfig:
    global _CONFIG
    if _CONFIG is None:
        config = load_config()
        configure_logging(config)
        configure_services(config)
        _CONFIG = config
    return _CONFIG


def _event_body(event: Dict[str, Any]) -> Any:
    body = event.get("body")
    if body and event.get("isBase64Encoded"):
        return base64.b64decode(body)
    return body


def handle_event(event: Dict[str, Any], config: AppConfig) -> Dict[str, Any]:
    params = event.get("queryStringParameters") or {}
    outcome = order_webhook_service.handle_webhook(_event_body(event), params.get("site"), config)
    return {
        "statusCode": outcome.http_status(config.response_mode),
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(outcome.to_dict()),
    }


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    return handle_event(event or {}, _get_config())
