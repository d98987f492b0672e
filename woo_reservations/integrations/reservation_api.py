from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import requests

from ..config import ReservationApiSettings
from ..utils import http_client
from .woo_commerce import IntegrationError

logger = logging.getLogger(__name__)

CANCELLED_RETURN_ID = 2


class ReservationError(IntegrationError):
    pass


@dataclass
class ReservationResult:
    success: bool
    return_id: Optional[int] = None
    confirmation: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)

    @property
    def cancelled(self) -> bool:
        return self.return_id == CANCELLED_RETURN_ID

    @property
    def scheduled(self) -> bool:
        return self.success and not self.cancelled

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "ReservationResult":
        raw_return_id = data.get("returnId")
        try:
            return_id = int(raw_return_id) if raw_return_id is not None else None
        except (TypeError, ValueError):
            return_id = None
        confirmation = data.get("confirmacion")
        return cls(
            success=bool(data.get("exitoso")),
            return_id=return_id,
            confirmation=str(confirmation) if confirmation not in (None, "") else None,
            data=data,
        )


def _post_json(url: str, payload: Any, settings: ReservationApiSettings, headers: Dict[str, str]) -> Any:
    try:
        response = http_client.post(
            url,
            data=json.dumps(payload),
            headers={"Accept": "application/json", "Content-Type": "application/json", **headers},
            timeout=settings.timeout_seconds,
        )
    except requests.RequestException as exc:
        logger.error("Reservation API request failed | url=%s", url, exc_info=True)
        raise ReservationError("Reservation API request failed") from exc

    try:
        return response.json()
    except ValueError as exc:
        logger.error(
            "Reservation API returned a non-JSON body | url=%s status=%s body=%s",
            url,
            response.status_code,
            response.text,
        )
        raise ReservationError("Reservation API returned invalid JSON", response=response.text) from exc


def get_auth_token(settings: ReservationApiSettings) -> str:
    """Exchange the configured username/password/store triple for a bearer token."""
    auth = _post_json(
        settings.auth_url,
        {"username": settings.username, "password": settings.password, "sucursal": settings.store},
        settings,
        {},
    )
    token = auth.get("token") if isinstance(auth, dict) else None
    if not token:
        raise ReservationError(f"Unable to obtain the authentication token {json.dumps(auth)}", response=auth)
    return str(token)


def submit_order(order: Dict[str, Any], settings: ReservationApiSettings) -> ReservationResult:
    """
    Send the enriched order to the reservation API.

    Raises ReservationError unless the API answers with a truthy `exitoso`.
    """
    if not settings.endpoint:
        raise ReservationError("Reservation API endpoint is not configured")

    headers: Dict[str, str] = {}
    if settings.uses_token:
        headers["Authorization"] = f"Bearer {get_auth_token(settings)}"

    data = _post_json(settings.endpoint, order, settings, headers)
    if not isinstance(data, dict) or not data.get("exitoso"):
        raise ReservationError(f"The reservation request was not successful {json.dumps(data)}", response=data)

    result = ReservationResult.from_response(data)
    logger.info(
        "Reservation API accepted order | orderId=%s returnId=%s confirmation=%s",
        order.get("id"),
        result.return_id,
        result.confirmation,
    )
    return result
