from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from ..config import AppConfig, SiteCredentials
from ..integrations import reservation_api, woo_commerce
from ..integrations.reservation_api import ReservationResult
from ..integrations.service_error import ServiceError
from ..integrations.woo_commerce import IntegrationError, RESERVATION_META_KEY
from . import catalog_enricher, metadata_normalizer

logger = logging.getLogger(__name__)

MSG_INVALID_PAYLOAD = "Invalid payload."
MSG_INVALID_ORDER = "Invalid Order Information."
MSG_ALREADY_PROCESSED = "Order already processed."
MSG_SKIPPED = "Skipped."
MSG_SCHEDULED = "Scheduled."
MSG_CANCELLED = "Cancelled."
MSG_UNABLE_TO_SCHEDULE = "Unable to schedule."

STATUS_CANCELLED = "cancelled"
DEFAULT_ORDER_STATUS = "processing"


@dataclass
class WebhookOutcome:
    message: str
    status: int
    data: Dict[str, Any] = field(default_factory=dict)
    writeback: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"message": self.message, "status": self.status, "data": self.data}
        if self.writeback is not None:
            body["writeback"] = self.writeback
        return body

    def http_status(self, response_mode: str) -> int:
        """`wrapped` keeps the transport at 200 so the storefront does not redeliver forever."""
        if response_mode == "http":
            return self.status
        return 200


@dataclass
class EnrichmentResult:
    ok: bool = True
    errors: Dict[int, str] = field(default_factory=dict)
    resolved: int = 0


def parse_payload(raw_body: Union[str, bytes, None]) -> Dict[str, Any]:
    if isinstance(raw_body, bytes):
        try:
            raw_body = raw_body.decode("utf-8")
        except UnicodeDecodeError as exc:
            logger.error("Invalid payload: body is not UTF-8")
            raise ServiceError(MSG_INVALID_PAYLOAD, 400) from exc
    text = raw_body if raw_body and raw_body.strip() else "{}"
    try:
        payload = json.loads(text)
    except ValueError as exc:
        logger.error("Invalid payload: %s", exc)
        raise ServiceError(MSG_INVALID_PAYLOAD, 400) from exc
    if not isinstance(payload, dict):
        logger.error("Invalid payload: expected a JSON object, got %s", type(payload).__name__)
        raise ServiceError(MSG_INVALID_PAYLOAD, 400)
    return payload


def find_reservation_id(meta_data: Any) -> Optional[Any]:
    """Value of the last `_reservation_id` meta entry, or None when missing or empty."""
    if not isinstance(meta_data, list):
        return None
    for entry in reversed(meta_data):
        if isinstance(entry, dict) and entry.get("key") == RESERVATION_META_KEY:
            return entry.get("value") or None
    return None


def is_booking_event(order: Dict[str, Any]) -> bool:
    return order.get("status") == STATUS_CANCELLED or bool(order.get("date_paid"))


def check_order(order: Dict[str, Any], config: AppConfig) -> Optional[WebhookOutcome]:
    """Return an outcome when the order must not be forwarded, None to continue."""
    order_id = order.get("id") or None
    order_status = order.get("status") or DEFAULT_ORDER_STATUS

    if not order_id or order.get("meta_data") is None:
        logger.info("Invalid Order Information.")
        return WebhookOutcome(MSG_INVALID_ORDER, 422)

    reservation_id = find_reservation_id(order.get("meta_data"))
    if order_status != STATUS_CANCELLED and reservation_id:
        logger.info("Order already processed | orderId=%s reservationId=%s", order_id, reservation_id)
        return WebhookOutcome(
            MSG_ALREADY_PROCESSED,
            201,
            {"order_id": order_id, "order_status": order_status, "reservation_id": reservation_id},
        )

    if config.require_payment_event and not is_booking_event(order):
        logger.info("Skipped order without payment or cancellation | orderId=%s status=%s", order_id, order_status)
        return WebhookOutcome(MSG_SKIPPED, 202)

    return None


def _line_items(order: Dict[str, Any]) -> List[Dict[str, Any]]:
    items = order.get("line_items") or []
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, dict)]


def _process_line_item(line_item: Dict[str, Any], credentials: SiteCredentials) -> bool:
    resolved = catalog_enricher.enrich_line_item(line_item, credentials)
    metadata_normalizer.normalize_line_item(line_item)
    return resolved


def enrich_order(order: Dict[str, Any], credentials: SiteCredentials, max_workers: int = 8) -> EnrichmentResult:
    """
    Enrich and normalize every line item of `order` in place.

    Line items run concurrently; each worker only touches its own item. The
    join reports catalog failures instead of raising so the caller decides
    whether the order may still be forwarded.
    """
    items = _line_items(order)
    result = EnrichmentResult()
    if not items:
        return result

    workers = max(1, min(max_workers, len(items)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="line-item") as pool:
        futures = [pool.submit(_process_line_item, item, credentials) for item in items]
        for index, future in enumerate(futures):
            try:
                if future.result():
                    result.resolved += 1
            except IntegrationError as exc:
                result.ok = False
                result.errors[index] = str(exc)

    if not result.ok:
        logger.error("Line item enrichment failed | orderId=%s errors=%s", order.get("id"), result.errors)
    else:
        logger.info(
            "Enriched order | orderId=%s lineItems=%s resolvedFromCatalog=%s",
            order.get("id"),
            len(items),
            result.resolved,
        )
    return result


def write_back_reservation(
    order_id: Any, result: ReservationResult, credentials: SiteCredentials
) -> Dict[str, Any]:
    if not result.confirmation:
        logger.warning("Reservation API returned no confirmation; writeback skipped | orderId=%s", order_id)
        return {"status": "skipped", "reason": "missing_confirmation"}
    try:
        woo_commerce.set_reservation_id(order_id, result.confirmation, credentials)
    except IntegrationError as exc:
        logger.error("Unable to store reservation id | orderId=%s error=%s", order_id, exc)
        return {"status": "failed", "order_id": order_id, "reservation_id": result.confirmation}
    return {"status": "success", "order_id": order_id, "reservation_id": result.confirmation}


def process_order(order: Dict[str, Any], site: Optional[str], config: AppConfig) -> WebhookOutcome:
    outcome = check_order(order, config)
    if outcome is not None:
        return outcome

    credentials = config.credentials_for(site)
    if site and site.lower() != credentials.site:
        logger.warning("Unknown site '%s'; using '%s' credentials", site, credentials.site)

    enrichment = enrich_order(order, credentials, config.enrich_max_workers)
    if not enrichment.ok:
        return WebhookOutcome(MSG_UNABLE_TO_SCHEDULE, 422)

    logger.debug("Data to send: %s", json.dumps(order, ensure_ascii=False))

    try:
        result = reservation_api.submit_order(order, config.reservation_api)
    except IntegrationError as exc:
        logger.error("Unable to schedule | orderId=%s error=%s", order.get("id"), exc)
        return WebhookOutcome(MSG_UNABLE_TO_SCHEDULE, 422)

    if not result.scheduled:
        return WebhookOutcome(MSG_CANCELLED, 200, result.data)

    writeback = write_back_reservation(order["id"], result, credentials)
    return WebhookOutcome(MSG_SCHEDULED, 200, result.data, writeback=writeback)


def handle_webhook(raw_body: Union[str, bytes, None], site: Optional[str], config: AppConfig) -> WebhookOutcome:
    """Run the full pipeline for one webhook delivery. Never raises for upstream failures."""
    try:
        order = parse_payload(raw_body)
    except ServiceError as exc:
        return WebhookOutcome(exc.message, exc.status)

    logger.debug("Data received: %s", json.dumps(order, ensure_ascii=False))
    outcome = process_order(order, site, config)
    logger.info("Response: %s", json.dumps(outcome.to_dict(), ensure_ascii=False))
    return outcome
