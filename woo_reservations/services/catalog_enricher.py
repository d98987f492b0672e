from __future__ import annotations

import logging
from typing import Any, Dict

from ..config import SiteCredentials
from ..integrations import woo_commerce

logger = logging.getLogger(__name__)


def needs_catalog_lookup(line_item: Dict[str, Any]) -> bool:
    """Woo sends an empty SKU for variable products ordered without a selected variation."""
    return "product_id" in line_item and "sku" in line_item and line_item["sku"] == ""


def enrich_line_item(line_item: Dict[str, Any], credentials: SiteCredentials) -> bool:
    """
    Fill `variation_id` and `sku` from the catalog when the line item has no SKU.

    Returns True when the line item was changed. Catalog failures raise
    woo_commerce.IntegrationError.
    """
    if not needs_catalog_lookup(line_item):
        return False

    product_id = line_item["product_id"]
    product = woo_commerce.get_product(product_id, credentials)
    variations = product.get("variations") or []
    if not isinstance(variations, list) or not variations:
        logger.debug("Product has no variations | productId=%s", product_id)
        return False

    variation_id = variations[0]
    line_item["variation_id"] = variation_id

    variation = woo_commerce.get_product_variation(product_id, variation_id, credentials)
    if "sku" in variation:
        line_item["sku"] = variation["sku"]

    logger.info(
        "Resolved line item variation | productId=%s variationId=%s sku=%s",
        product_id,
        variation_id,
        line_item.get("sku"),
    )
    return True
