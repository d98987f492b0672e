from __future__ import annotations

from ..config import AppConfig


def configure_services(config: AppConfig) -> None:
    """
    Apply process-wide settings shared by every request.

    The AppConfig itself is handed to the pipeline per request; only the
    outbound HTTP limit lives at module level.
    """
    from ..utils import http_client

    http_client.configure(
        concurrency=config.http_concurrency,
        connect_timeout=config.http_connect_timeout_seconds,
        read_timeout=config.http_read_timeout_seconds,
    )
