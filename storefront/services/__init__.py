# Service modules

from .storefront_client import (
    StorefrontClient,
    StorefrontClientError,
    ShippingEstimateError,
    CheckoutHandoffError,
)
from .shipping_estimator import ShippingEstimator, load_destination, save_destination
from .printful import PrintfulClient, PrintfulError, cheapest_rate_minor_units

__all__ = [
    "StorefrontClient",
    "StorefrontClientError",
    "ShippingEstimateError",
    "CheckoutHandoffError",
    "ShippingEstimator",
    "load_destination",
    "save_destination",
    "PrintfulClient",
    "PrintfulError",
    "cheapest_rate_minor_units",
]
