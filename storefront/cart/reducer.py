"""
Cart Reducer

Pure state machine over ``CartState``. Every action returns a new state;
no I/O happens here. Derived totals are produced by ``project_totals`` at
the end of every transition.
"""

from dataclasses import dataclass
from typing import Iterable, Union

from ..models.cart import CartState, CartTotals, LineItem


@dataclass(frozen=True)
class AddItem:
    item: LineItem


@dataclass(frozen=True)
class RemoveItem:
    product_id: int
    variant_id: str


@dataclass(frozen=True)
class UpdateQuantity:
    product_id: int
    variant_id: str
    quantity: int


@dataclass(frozen=True)
class ToggleOpen:
    pass


@dataclass(frozen=True)
class Open:
    pass


@dataclass(frozen=True)
class Close:
    pass


@dataclass(frozen=True)
class Clear:
    pass


@dataclass(frozen=True)
class LoadItems:
    items: tuple[LineItem, ...]


CartAction = Union[AddItem, RemoveItem, UpdateQuantity, ToggleOpen, Open, Close, Clear, LoadItems]

EMPTY_CART = CartState()


def project_totals(items: Iterable[LineItem]) -> CartTotals:
    """Derive item count and subtotal from the items"""
    total_item_count = 0
    subtotal = 0
    for item in items:
        total_item_count += item.quantity
        subtotal += item.quantity * item.unit_price_minor_units
    return CartTotals(total_item_count=total_item_count, subtotal_minor_units=subtotal)


def merge_items(items: Iterable[LineItem], incoming: LineItem) -> tuple[LineItem, ...]:
    """Add ``incoming`` to ``items``, accumulating quantity on an existing line.

    The existing line keeps its price, name and image snapshot.
    """
    merged = []
    found = False
    for item in items:
        if item.key == incoming.key:
            item = item.model_copy(update={"quantity": item.quantity + incoming.quantity})
            found = True
        merged.append(item)
    if not found:
        merged.append(incoming)
    return tuple(merged)


def normalize_items(items: Iterable[LineItem]) -> tuple[LineItem, ...]:
    """Collapse duplicate identity pairs, first snapshot wins"""
    normalized: tuple[LineItem, ...] = ()
    for item in items:
        normalized = merge_items(normalized, item)
    return normalized


def _with_items(state: CartState, items: tuple[LineItem, ...]) -> CartState:
    totals = project_totals(items)
    return state.model_copy(
        update={
            "items": items,
            "total_item_count": totals.total_item_count,
            "subtotal_minor_units": totals.subtotal_minor_units,
        }
    )


def _without(state: CartState, product_id: int, variant_id: str) -> tuple[LineItem, ...]:
    return tuple(item for item in state.items if item.key != (product_id, variant_id))


def cart_reducer(state: CartState, action: CartAction) -> CartState:
    """Apply one action to the cart state"""
    if isinstance(action, AddItem):
        # Lines never hold a non-positive quantity
        if action.item.quantity <= 0:
            return state
        return _with_items(state, merge_items(state.items, action.item))

    if isinstance(action, RemoveItem):
        if state.find(action.product_id, action.variant_id) is None:
            return state
        return _with_items(state, _without(state, action.product_id, action.variant_id))

    if isinstance(action, UpdateQuantity):
        if action.quantity <= 0:
            return cart_reducer(state, RemoveItem(action.product_id, action.variant_id))
        items = tuple(
            item.model_copy(update={"quantity": action.quantity})
            if item.key == (action.product_id, action.variant_id)
            else item
            for item in state.items
        )
        return _with_items(state, items)

    if isinstance(action, ToggleOpen):
        return state.model_copy(update={"is_open": not state.is_open})

    if isinstance(action, Open):
        return state.model_copy(update={"is_open": True})

    if isinstance(action, Close):
        return state.model_copy(update={"is_open": False})

    if isinstance(action, Clear):
        return _with_items(state, ())

    if isinstance(action, LoadItems):
        return _with_items(state, normalize_items(action.items))

    return state
