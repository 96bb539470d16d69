"""Shipping estimate API routes"""

import logging
from typing import Any, Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request

from ..core.config import settings
from ..models.shipping import ShippingEstimateData, ShippingEstimateResponse
from ..services.printful import PrintfulClient, PrintfulError, cheapest_rate_minor_units

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/shipping", tags=["Shipping"])

printful_client: Optional[PrintfulClient] = None


def get_printful_client() -> PrintfulClient:
    """Get or create the Printful client"""
    global printful_client
    if not settings.printful_configured:
        raise HTTPException(status_code=500, detail="Printful API key missing")
    if printful_client is None:
        printful_client = PrintfulClient(
            api_key=settings.printful_api_key,
            store_id=settings.resolved_printful_store_id,
            base_url=settings.printful_api_url,
            timeout=settings.http_timeout_seconds,
        )
    return printful_client


def _to_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def normalize_items(raw_items: Any) -> list[dict[str, Any]]:
    """Coerce posted items; missing quantities count as one, non-positive are dropped"""
    if not isinstance(raw_items, list):
        return []

    normalized = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            continue
        quantity = _to_int(raw.get("quantity")) or 1
        if quantity <= 0:
            continue
        normalized.append(
            {
                "variant_id": raw.get("variant_id"),
                "product_id": _to_int(raw.get("product_id")) or None,
                "quantity": quantity,
            }
        )
    return normalized


async def resolve_variants(
    printful: PrintfulClient,
    items: list[dict[str, Any]],
) -> list[dict[str, int]]:
    """Numeric Printful variant IDs, falling back to the product's first variant"""
    resolved = []
    for item in items:
        variant_id = _to_int(item["variant_id"])
        if variant_id is None or variant_id <= 0:
            variant_id = None
            if item["product_id"]:
                variant_id = await printful.first_variant_id(item["product_id"])
        if variant_id:
            resolved.append({"variant_id": variant_id, "quantity": item["quantity"]})
    return resolved


@router.post(
    "/estimate",
    response_model=ShippingEstimateResponse,
    response_model_exclude_none=True,
)
async def estimate_shipping(
    request: Request,
    printful: PrintfulClient = Depends(get_printful_client),
):
    """
    Quote the cheapest shipping rate for the posted cart.

    Prices are never read from the request; only variant IDs, quantities and
    the destination are forwarded to Printful.
    """
    try:
        payload = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Invalid JSON")

    items = normalize_items(payload.get("items"))
    if not items:
        raise HTTPException(status_code=400, detail="No items")

    resolved = await resolve_variants(printful, items)
    if not resolved:
        raise HTTPException(status_code=400, detail="No resolvable variant IDs")

    recipient = {
        "country_code": str(payload.get("country") or "US").upper(),
        "zip": str(payload.get("zip") or "").strip(),
    }
    if payload.get("state"):
        recipient["state_code"] = str(payload["state"])

    try:
        rates = await printful.shipping_rates(recipient, resolved, currency=settings.currency)
    except PrintfulError as e:
        return ShippingEstimateResponse(success=False, status=e.status_code, error=str(e))
    except httpx.HTTPError as e:
        logger.error(f"Printful shipping rates request failed: {e}")
        return ShippingEstimateResponse(success=False, error=str(e) or "Printful request failed")

    shipping_cents = cheapest_rate_minor_units(rates)
    logger.info(f"Estimated shipping to {recipient['country_code']}: {shipping_cents} cents")

    return ShippingEstimateResponse(
        success=True,
        data=ShippingEstimateData(shipping_cents=shipping_cents, rates=rates),
    )
