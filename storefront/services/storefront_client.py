"""
Storefront API Client

HTTP client for the storefront backend: shipping estimates and the
checkout handoff. The cart only sends identity pairs and quantities;
prices are re-derived server-side from the catalog.
"""

import logging
from typing import Any, Iterable, Optional

import httpx
from pydantic import ValidationError

from ..core.config import settings
from ..models.shipping import EstimateItem, ShippingDestination

logger = logging.getLogger(__name__)


class StorefrontClientError(Exception):
    """Base exception for storefront client errors"""
    pass


class ShippingEstimateError(StorefrontClientError):
    """Shipping estimate could not be obtained"""
    pass


class CheckoutHandoffError(StorefrontClientError):
    """Checkout session could not be created"""
    pass


def _items_payload(items: Iterable[Any], error_cls: type[StorefrontClientError]) -> list[dict]:
    """Identity pairs and quantities from mappings or cart lines"""
    payload = []
    for item in items:
        if not isinstance(item, EstimateItem):
            try:
                item = EstimateItem.model_validate(item)
            except ValidationError as e:
                raise error_cls(f"Invalid cart item: {e.error_count()} validation errors") from e
        payload.append(item.model_dump())
    return payload


class StorefrontClient:
    """Client for the storefront backend API"""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize storefront client.

        Args:
            base_url: Base URL of the storefront backend
            timeout: Request timeout in seconds
            transport: Optional transport, used by tests
        """
        self.base_url = base_url.rstrip("/")
        self._http_client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls) -> "StorefrontClient":
        """Create client from application settings"""
        return cls(settings.storefront_base_url, timeout=settings.http_timeout_seconds)

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    async def _post(self, path: str, body: dict) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        response = await self._http_client.post(
            url,
            json=body,
            headers={"Accept": "application/json"},
        )
        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.status_code >= 400 and not data:
            logger.error(f"Request failed: {response.status_code} - {response.text}")
            response.raise_for_status()

        if not isinstance(data, dict):
            raise StorefrontClientError(f"Unexpected response from {path}")
        return data

    # ==================== Shipping ====================

    async def estimate_shipping(
        self,
        destination: ShippingDestination,
        items: Iterable[Any],
    ) -> int:
        """
        Get a shipping estimate in minor units.

        Raises:
            ShippingEstimateError: request failed or was rejected
        """
        body = {
            "country": destination.country,
            "zip": destination.zip,
            "items": _items_payload(items, ShippingEstimateError),
        }
        try:
            data = await self._post("/api/shipping/estimate", body)
        except (httpx.HTTPError, StorefrontClientError) as e:
            raise ShippingEstimateError(str(e) or "Failed to estimate") from e

        if not data.get("success"):
            raise ShippingEstimateError(str(data.get("error") or data.get("detail") or "Failed to estimate"))

        try:
            return int((data.get("data") or {}).get("shipping_cents") or 0)
        except (TypeError, ValueError) as e:
            raise ShippingEstimateError("Malformed shipping estimate") from e

    # ==================== Checkout ====================

    async def create_checkout_session(
        self,
        items: Iterable[Any],
        destination: Optional[ShippingDestination] = None,
        success_url: Optional[str] = None,
        cancel_url: Optional[str] = None,
    ) -> str:
        """
        Hand the cart off to checkout and return the payment redirect URL.

        Raises:
            CheckoutHandoffError: session could not be created
        """
        payload = _items_payload(items, CheckoutHandoffError)
        if not payload:
            raise CheckoutHandoffError("Cart is empty")

        body: dict[str, Any] = {"items": payload}
        if destination is not None:
            body["destination"] = destination.model_dump()
        if success_url:
            body["successUrl"] = success_url
        if cancel_url:
            body["cancelUrl"] = cancel_url

        try:
            data = await self._post("/api/checkout/create", body)
        except (httpx.HTTPError, StorefrontClientError) as e:
            raise CheckoutHandoffError(str(e) or "Checkout failed") from e

        url = data.get("url")
        if not data.get("success") or not url:
            raise CheckoutHandoffError(str(data.get("error") or data.get("detail") or "Checkout failed"))

        logger.info(f"Checkout session {data.get('sessionId')} created for {len(payload)} lines")
        return url
