from __future__ import annotations

import logging
import time

from flask import Flask, g, jsonify, request
from werkzeug.exceptions import RequestEntityTooLarge


def _should_track(path: str) -> bool:
    return path != "/health"


def init_request_logging(app: Flask) -> None:
    """
    Attach basic request/response logging and JSON error pages.
    """
    logger = logging.getLogger("woo_reservations.http")

    @app.before_request
    def _log_start() -> None:  # type: ignore[return-value]
        if _should_track(request.path):
            g._request_logging_started_at = time.perf_counter()

    @app.after_request
    def _log_response(response):  # type: ignore[return-value]
        if _should_track(request.path):
            started = getattr(g, "_request_logging_started_at", None)
            duration_ms = None
            if isinstance(started, float):
                duration_ms = (time.perf_counter() - started) * 1000
            logger.info(
                "HTTP %s %s site=%s -> %s (%.1f ms)",
                request.method,
                request.path,
                request.args.get("site", "-"),
                response.status_code,
                duration_ms or -1,
            )
        return response

    @app.errorhandler(404)
    def _not_found(error):  # type: ignore[return-value]
        logger.warning("Route not found: %s %s", request.method, request.path)
        return jsonify({"message": "Endpoint does not exist", "status": 404, "data": {}}), 404

    @app.errorhandler(405)
    def _method_not_allowed(error):  # type: ignore[return-value]
        logger.warning("Method not allowed: %s %s", request.method, request.path)
        return jsonify({"message": "Method not allowed", "status": 405, "data": {}}), 405

    @app.errorhandler(RequestEntityTooLarge)
    def _request_too_large(error):  # type: ignore[return-value]
        max_bytes = app.config.get("MAX_CONTENT_LENGTH")
        logger.warning(
            "Payload too large: %s %s (max=%s)",
            request.method,
            request.path,
            max_bytes,
        )
        return jsonify({"message": "Invalid payload.", "status": 413, "data": {}}), 413
