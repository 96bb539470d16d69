"""
Cart Store

Owns one live ``CartState`` for a context (page). Every operation applies a
reducer action, replaces the state, persists the items and notifies
observers. Nothing here raises on storage or input problems; failures go to
the event reporter and the cart keeps working in memory.
"""

import logging
from collections.abc import Mapping
from typing import Callable, Optional, Union

from pydantic import ValidationError

from ..core.config import settings
from ..models.cart import CartState, LineItem
from .events import CartEvent, CartEventKind, CartEventReporter, LoggingEventReporter
from .notifier import CART_UPDATED, TOGGLE_CART, ChangeNotifier
from .persistence import CartPersistence, CorruptCartDataError
from .reducer import (
    EMPTY_CART,
    AddItem,
    CartAction,
    Clear,
    Close,
    LoadItems,
    Open,
    RemoveItem,
    ToggleOpen,
    UpdateQuantity,
    cart_reducer,
)
from .storage import KeyValueStorage, StorageError, open_durable_storage

logger = logging.getLogger(__name__)

StateListener = Callable[[CartState], None]
Acknowledge = Callable[[str], None]


class CartStore:
    """
    Stateful cart for one context.

    Usage:
        store = CartStore(storage, notifier)
        store.add_item(LineItem(...))
        unsubscribe = store.subscribe(render)
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        notifier: ChangeNotifier,
        storage_key: Optional[str] = None,
        reporter: Optional[CartEventReporter] = None,
        acknowledge: Optional[Acknowledge] = None,
    ):
        self.persistence = CartPersistence(storage, storage_key or settings.cart_storage_key)
        self.notifier = notifier
        self.reporter = reporter or LoggingEventReporter()
        self.acknowledge = acknowledge
        self._state: CartState = EMPTY_CART
        self._listeners: list[StateListener] = []
        self._unsubscribe_toggle = notifier.subscribe(TOGGLE_CART, self.toggle_cart)
        self._hydrate()

    @classmethod
    def from_settings(
        cls,
        notifier: ChangeNotifier,
        reporter: Optional[CartEventReporter] = None,
        acknowledge: Optional[Acknowledge] = None,
    ) -> "CartStore":
        """Create a store on the configured durable storage"""
        return cls(
            open_durable_storage(settings.cart_storage_path),
            notifier,
            storage_key=settings.cart_storage_key,
            reporter=reporter,
            acknowledge=acknowledge,
        )

    @property
    def state(self) -> CartState:
        return self._state

    @property
    def storage_key(self) -> str:
        return self.persistence.key

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` with the new state after every operation"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        """Detach from the notifier and drop listeners"""
        self._unsubscribe_toggle()
        self._listeners.clear()

    # ==================== Operations ====================

    def add_item(self, item: Union[LineItem, Mapping]) -> None:
        """Add an item, merging quantity into an existing line"""
        if not isinstance(item, LineItem):
            try:
                item = LineItem.model_validate(item)
            except ValidationError as e:
                self._report(CartEventKind.INVALID_INPUT, "Ignoring invalid cart item", e)
                return

        if item.quantity <= 0:
            self._report(CartEventKind.INVALID_INPUT, f"Ignoring non-positive quantity for {item.name}")
            return

        self._apply(AddItem(item))
        self._acknowledge(f"{item.name} added to cart!")

    def remove_item(self, product_id: int, variant_id: str) -> None:
        """Remove a line; unknown pairs are ignored"""
        existing = self._state.find(product_id, variant_id)
        self._apply(RemoveItem(product_id, variant_id))
        if existing is not None:
            self._acknowledge(f"{existing.name} removed from cart")

    def update_quantity(self, product_id: int, variant_id: str, quantity: int) -> None:
        """Set a line's quantity; zero or less removes the line"""
        self._apply(UpdateQuantity(product_id, variant_id, quantity))

    def toggle_cart(self) -> None:
        self._apply(ToggleOpen())

    def open_cart(self) -> None:
        self._apply(Open())

    def close_cart(self) -> None:
        self._apply(Close())

    def clear_cart(self) -> None:
        self._apply(Clear())
        self._acknowledge("Cart cleared")

    def checkout_items(self) -> list[dict]:
        """Snapshot of the items for the checkout handoff"""
        return [
            {
                "product_id": item.product_id,
                "variant_id": item.variant_id,
                "quantity": item.quantity,
            }
            for item in self._state.items
        ]

    # ==================== Internals ====================

    def _hydrate(self) -> None:
        try:
            items = self.persistence.load()
        except (StorageError, CorruptCartDataError) as e:
            self._report(CartEventKind.HYDRATION_FAILED, "Starting with an empty cart", e)
            return

        if items:
            self._state = cart_reducer(self._state, LoadItems(tuple(items)))
            logger.debug(f"Hydrated cart with {len(self._state.items)} lines")

    def _apply(self, action: CartAction) -> None:
        self._state = cart_reducer(self._state, action)
        self._persist()
        self._notify_listeners()

    def _persist(self) -> None:
        try:
            self.persistence.save(self._state.items)
        except StorageError as e:
            self._report(CartEventKind.PERSIST_FAILED, "Cart kept in memory only", e)
            return
        self.notifier.publish(CART_UPDATED)

    def _notify_listeners(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception as e:
                self._report(CartEventKind.LISTENER_FAILED, "Cart listener failed", e)

    def _acknowledge(self, message: str) -> None:
        if self.acknowledge is None:
            return
        try:
            self.acknowledge(message)
        except Exception as e:
            self._report(CartEventKind.ACKNOWLEDGE_FAILED, "Acknowledgment failed", e)

    def _report(self, kind: CartEventKind, message: str, error: Optional[BaseException] = None) -> None:
        self.reporter.report(
            CartEvent(kind=kind, message=message, error=error, context={"storage_key": self.storage_key})
        )
