"""Shipping models for the storefront"""

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ShippingDestination(BaseModel):
    """User-entered shipping destination"""
    country: str = "US"
    zip: str = ""

    @field_validator("country", mode="before")
    @classmethod
    def normalize_country(cls, value: Any) -> str:
        return str(value or "US").strip().upper()

    @field_validator("zip", mode="before")
    @classmethod
    def normalize_zip(cls, value: Any) -> str:
        return str(value or "").strip()

    @property
    def needs_estimate(self) -> bool:
        """US destinations need a postal code before they can be quoted"""
        return bool(self.zip) or self.country != "US"


class ShippingEstimate(BaseModel):
    """Advisory shipping estimate.

    ``shipping_minor_units`` is ``None`` while unknown or pending and ``0``
    when shipping is confirmed free.
    """
    destination_country: str
    destination_postal_code: str = ""
    shipping_minor_units: Optional[int] = None
    error: Optional[str] = None
    pending: bool = False


class EstimateItem(BaseModel):
    """Item of a shipping estimate or checkout handoff"""
    model_config = ConfigDict(from_attributes=True)

    product_id: int
    variant_id: Union[int, str]
    quantity: int = Field(gt=0)


class ShippingEstimateData(BaseModel):
    shipping_cents: int
    rates: list[dict[str, Any]] = []


class ShippingEstimateResponse(BaseModel):
    """Response from the shipping estimate endpoint"""
    success: bool
    data: Optional[ShippingEstimateData] = None
    error: Optional[str] = None
    status: Optional[int] = None
