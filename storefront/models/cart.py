"""Cart models for the storefront"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LineItem(BaseModel):
    """One product variant in the cart.

    Field aliases are the persisted wire names (``id``, ``variantId``,
    ``price``, ``image``). ``unit_price_minor_units``, ``name`` and
    ``image_url`` are a snapshot taken when the item was added.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    product_id: int = Field(alias="id")
    variant_id: str = Field(alias="variantId")
    quantity: int = Field(ge=1)
    unit_price_minor_units: int = Field(alias="price", ge=0)
    name: str
    image_url: str = Field(alias="image")
    size: Optional[str] = None
    color: Optional[str] = None

    @property
    def key(self) -> tuple[int, str]:
        """Identity pair of the line"""
        return (self.product_id, self.variant_id)

    @property
    def line_total_minor_units(self) -> int:
        return self.quantity * self.unit_price_minor_units

    def to_storage(self) -> dict:
        """Persisted representation (wire names, absent color omitted)"""
        return self.model_dump(by_alias=True, exclude_none=True)


class CartTotals(BaseModel):
    """Totals derived from the cart items"""

    model_config = ConfigDict(frozen=True)

    total_item_count: int = 0
    subtotal_minor_units: int = 0


class CartState(BaseModel):
    """Live cart state.

    ``total_item_count`` and ``subtotal_minor_units`` are always produced by
    ``project_totals`` from ``items``; the reducer never sets them directly.
    """

    model_config = ConfigDict(frozen=True)

    items: tuple[LineItem, ...] = ()
    is_open: bool = False
    total_item_count: int = 0
    subtotal_minor_units: int = 0

    def find(self, product_id: int, variant_id: str) -> Optional[LineItem]:
        """Get the line for an identity pair"""
        return next(
            (item for item in self.items if item.key == (product_id, variant_id)),
            None,
        )

    @property
    def is_empty(self) -> bool:
        return not self.items
