"""
Printful API Client

Backend-side access to Printful shipping rates and store products, used to
quote shipping for a cart.
"""

import logging
import math
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)


class PrintfulError(Exception):
    """Printful request failed"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def cheapest_rate_minor_units(rates: list[dict[str, Any]]) -> int:
    """Cheapest finite rate converted from dollars to cents; 0 without rates"""
    best: Optional[float] = None
    for rate in rates:
        try:
            amount = float(rate.get("rate") or rate.get("amount") or 0)
        except (TypeError, ValueError):
            continue
        if not math.isfinite(amount):
            continue
        if best is None or amount < best:
            best = amount
    # Half-up rounding to whole cents
    return math.floor(best * 100 + 0.5) if best is not None else 0


class PrintfulClient:
    """Client for the Printful REST API"""

    def __init__(
        self,
        api_key: str,
        store_id: str,
        base_url: str = "https://api.printful.com",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.store_id = store_id
        self._http_client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
                "X-PF-Store-Id": store_id,
            },
        )

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    async def shipping_rates(
        self,
        recipient: dict[str, Any],
        items: list[dict[str, int]],
        currency: str = "USD",
    ) -> list[dict[str, Any]]:
        """
        Get shipping rates for a recipient and variant quantities.

        Raises:
            PrintfulError: Printful rejected the request
        """
        body = {"recipient": recipient, "items": items, "currency": currency}
        response = await self._http_client.post(f"{self.base_url}/shipping/rates", json=body)

        if response.status_code >= 400:
            logger.error(f"Printful shipping rates failed: {response.status_code} - {response.text}")
            raise PrintfulError(response.text, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError:
            return []
        result = data.get("result") if isinstance(data, dict) else None
        return result if isinstance(result, list) else []

    async def get_store_product(self, product_id: int) -> Optional[dict[str, Any]]:
        """Get a store product with its sync variants, or None"""
        try:
            response = await self._http_client.get(f"{self.base_url}/store/products/{product_id}")
        except httpx.HTTPError as e:
            logger.error(f"Error fetching Printful product {product_id}: {e}")
            return None

        if response.status_code >= 400:
            logger.error(f"Printful product {product_id} lookup failed: {response.status_code}")
            return None

        try:
            data = response.json()
        except ValueError:
            return None
        result = data.get("result") if isinstance(data, dict) else None
        return result or None

    async def first_variant_id(self, product_id: int) -> Optional[int]:
        """ID of the product's first variant with a positive numeric ID"""
        product = await self.get_store_product(product_id)
        if not product:
            return None

        for variant in product.get("sync_variants") or product.get("variants") or []:
            try:
                variant_id = int(variant.get("id"))
            except (TypeError, ValueError):
                continue
            if variant_id > 0:
                return variant_id
        return None
