from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests
from requests.auth import HTTPBasicAuth

from ..config import SiteCredentials
from ..utils import http_client

logger = logging.getLogger(__name__)

RESERVATION_META_KEY = "_reservation_id"


class IntegrationError(RuntimeError):
    def __init__(self, message: str, response: Optional[Any] = None, status: int = 502):
        super().__init__(message)
        self.response = response
        self.status = status


def _error_body(exc: requests.RequestException) -> Optional[Any]:
    if exc.response is None:
        return None
    try:
        return exc.response.json()
    except ValueError:
        return exc.response.text


def _request(method: str, credentials: SiteCredentials, endpoint: str, **kwargs: Any) -> Any:
    if not credentials.is_configured:
        raise IntegrationError(f"WooCommerce is not configured for site '{credentials.site}'")

    url = f"{credentials.api_base}/{endpoint.lstrip('/')}"
    try:
        response = http_client.request(
            method,
            url,
            auth=HTTPBasicAuth(credentials.consumer_key, credentials.consumer_secret),
            headers={"Accept": "application/json"},
            timeout=credentials.timeout_seconds,
            **kwargs,
        )
        response.raise_for_status()
    except requests.RequestException as exc:
        data = _error_body(exc)
        status_code = getattr(exc.response, "status_code", None)
        logger.error(
            "WooCommerce request failed | method=%s endpoint=%s site=%s status=%s response=%s",
            method,
            endpoint,
            credentials.site,
            status_code,
            data,
            exc_info=True,
        )
        raise IntegrationError(
            f"WooCommerce {method} {endpoint} failed", response=data, status=status_code or 502
        ) from exc

    try:
        return response.json()
    except ValueError as exc:
        logger.error("WooCommerce returned a non-JSON body | endpoint=%s", endpoint)
        raise IntegrationError(f"WooCommerce {method} {endpoint} returned invalid JSON", response=response.text) from exc


def get_product(product_id: Any, credentials: SiteCredentials) -> Dict[str, Any]:
    payload = _request("GET", credentials, f"products/{product_id}")
    if not isinstance(payload, dict):
        raise IntegrationError(f"Unexpected product payload for {product_id}", response=payload)
    return payload


def get_product_variation(product_id: Any, variation_id: Any, credentials: SiteCredentials) -> Dict[str, Any]:
    payload = _request("GET", credentials, f"products/{product_id}/variations/{variation_id}")
    if not isinstance(payload, dict):
        raise IntegrationError(
            f"Unexpected variation payload for {product_id}/{variation_id}", response=payload
        )
    return payload


def set_reservation_id(order_id: Any, reservation_id: Any, credentials: SiteCredentials) -> Dict[str, Any]:
    """
    Store the booking confirmation on the Woo order as `_reservation_id` meta.

    Woo matches meta by key, so this replaces the value on re-delivery instead
    of adding a second entry.
    """
    body = _request(
        "PUT",
        credentials,
        f"orders/{order_id}",
        json={"meta_data": [{"key": RESERVATION_META_KEY, "value": reservation_id}]},
    )
    logger.info("Stored reservation id on Woo order | orderId=%s reservationId=%s", order_id, reservation_id)
    if not isinstance(body, dict):
        body = {}
    return {"status": "success", "response": {"id": body.get("id"), "status": body.get("status")}}
