# Storefront Models

from .cart import LineItem, CartState, CartTotals
from .shipping import (
    ShippingDestination,
    ShippingEstimate,
    EstimateItem,
    ShippingEstimateData,
    ShippingEstimateResponse,
)

__all__ = [
    "LineItem",
    "CartState",
    "CartTotals",
    "ShippingDestination",
    "ShippingEstimate",
    "EstimateItem",
    "ShippingEstimateData",
    "ShippingEstimateResponse",
]
