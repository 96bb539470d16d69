"""
Shipping Estimator

Keeps the displayed shipping estimate for the cart. Each refresh takes a
new request token; a response is applied only if its token is still the
latest, so a slow answer for an old destination never overwrites a newer
one.
"""

import json
import logging
from typing import Any, Callable, Iterable, Optional

from pydantic import ValidationError

from ..cart.storage import KeyValueStorage, StorageError
from ..core.config import settings
from ..models.shipping import ShippingDestination, ShippingEstimate
from .storefront_client import ShippingEstimateError, StorefrontClient

logger = logging.getLogger(__name__)


class ShippingEstimator:
    """Latest-request-wins shipping estimate state"""

    def __init__(
        self,
        client: StorefrontClient,
        on_change: Optional[Callable[[ShippingEstimate], None]] = None,
    ):
        self.client = client
        self.on_change = on_change
        self.estimate = ShippingEstimate(destination_country="US")
        self._latest_token = 0

    @property
    def latest_token(self) -> int:
        return self._latest_token

    def _next_token(self) -> int:
        self._latest_token += 1
        return self._latest_token

    def _apply(self, estimate: ShippingEstimate) -> None:
        self.estimate = estimate
        if self.on_change is not None:
            self.on_change(estimate)

    async def refresh(
        self,
        destination: ShippingDestination,
        items: Iterable[Any],
    ) -> ShippingEstimate:
        """
        Re-estimate shipping for the destination and cart items.

        An empty cart ships free without a request. A US destination with no
        postal code stays unknown. Returns the estimate currently displayed.
        """
        items = list(items)
        token = self._next_token()

        if not items:
            self._apply(
                ShippingEstimate(
                    destination_country=destination.country,
                    destination_postal_code=destination.zip,
                    shipping_minor_units=0,
                )
            )
            return self.estimate

        if not destination.needs_estimate:
            self._apply(
                ShippingEstimate(
                    destination_country=destination.country,
                    destination_postal_code=destination.zip,
                )
            )
            return self.estimate

        self._apply(self.estimate.model_copy(update={"pending": True, "error": None}))

        try:
            shipping_minor_units = await self.client.estimate_shipping(destination, items)
            result = ShippingEstimate(
                destination_country=destination.country,
                destination_postal_code=destination.zip,
                shipping_minor_units=shipping_minor_units,
            )
        except ShippingEstimateError as e:
            logger.warning(f"Shipping estimate failed for {destination.country}: {e}")
            result = ShippingEstimate(
                destination_country=destination.country,
                destination_postal_code=destination.zip,
                error=str(e),
            )
        except Exception as e:
            logger.error(f"Unexpected shipping estimate error for {destination.country}: {e}", exc_info=True)
            result = ShippingEstimate(
                destination_country=destination.country,
                destination_postal_code=destination.zip,
                error="Failed to estimate",
            )

        if token != self._latest_token:
            logger.debug(f"Discarding stale shipping estimate (token {token}, latest {self._latest_token})")
            return self.estimate

        self._apply(result)
        return result


def load_destination(storage: KeyValueStorage, key: Optional[str] = None) -> ShippingDestination:
    """Read the saved destination, defaulting to the US with no postal code"""
    key = key or settings.destination_storage_key
    try:
        raw = storage.get_item(key)
        if raw:
            return ShippingDestination.model_validate(json.loads(raw))
    except (StorageError, ValueError, ValidationError) as e:
        logger.debug(f"Ignoring saved shipping destination: {e}")
    return ShippingDestination()


def save_destination(
    storage: KeyValueStorage,
    destination: ShippingDestination,
    key: Optional[str] = None,
) -> None:
    """Remember the destination; failures are only logged"""
    key = key or settings.destination_storage_key
    try:
        storage.set_item(key, json.dumps(destination.model_dump()))
    except StorageError as e:
        logger.debug(f"Could not save shipping destination: {e}")
