from __future__ import annotations

import threading
from typing import Any, Tuple, Union

import requests

_ACQUIRE_TIMEOUT_SECONDS = 15.0

_default_timeout: Tuple[float, float] = (3.5, 12.0)
_http_semaphore = threading.BoundedSemaphore(8)
_settings_lock = threading.Lock()


TimeoutArg = Union[None, float, int, Tuple[float, float]]


def configure(concurrency: int, connect_timeout: float, read_timeout: float) -> None:
    """Apply the per-process outbound HTTP limit and default timeouts."""
    global _http_semaphore, _default_timeout
    with _settings_lock:
        _http_semaphore = threading.BoundedSemaphore(max(1, min(int(concurrency), 32)))
        _default_timeout = (float(connect_timeout), float(read_timeout))


def default_timeout() -> Tuple[float, float]:
    return _default_timeout


def request(method: str, url: str, *, timeout: TimeoutArg = None, **kwargs: Any) -> requests.Response:
    """
    Small wrapper around requests.request() that:
      - enforces sane default timeouts
      - limits concurrent outbound HTTP per-process
    """
    effective_timeout: TimeoutArg = timeout
    if effective_timeout is None:
        effective_timeout = _default_timeout

    semaphore = _http_semaphore
    acquired = semaphore.acquire(timeout=_ACQUIRE_TIMEOUT_SECONDS)
    if not acquired:
        raise requests.Timeout("Outbound HTTP concurrency limit reached")
    try:
        return requests.request(method, url, timeout=effective_timeout, **kwargs)
    finally:
        try:
            semaphore.release()
        except ValueError:
            pass


def post(url: str, *, timeout: TimeoutArg = None, **kwargs: Any) -> requests.Response:
    return request("POST", url, timeout=timeout, **kwargs)
