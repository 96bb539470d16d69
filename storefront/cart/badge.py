"""Cart count badge that reads the persisted cart on its own"""

import logging
from typing import Callable, Optional

from ..core.config import settings
from .events import CartEvent, CartEventKind, CartEventReporter, LoggingEventReporter
from .notifier import CART_UPDATED, TOGGLE_CART, ChangeNotifier
from .persistence import CartPersistence, CorruptCartDataError
from .storage import KeyValueStorage, StorageError

logger = logging.getLogger(__name__)

MAX_BADGE_COUNT = 99


class CartCountObserver:
    """
    Item count for a cart badge.

    Does not share state with any ``CartStore``: it re-reads the persisted
    items whenever a ``cartUpdated`` signal arrives, so it may briefly lag
    behind a store until the signal is observed.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        notifier: ChangeNotifier,
        storage_key: Optional[str] = None,
        reporter: Optional[CartEventReporter] = None,
        on_change: Optional[Callable[[int], None]] = None,
    ):
        self.persistence = CartPersistence(storage, storage_key or settings.cart_storage_key)
        self.notifier = notifier
        self.reporter = reporter or LoggingEventReporter()
        self.on_change = on_change
        self.count = 0
        self.refresh()
        self._unsubscribe = notifier.subscribe(CART_UPDATED, self.refresh)

    def refresh(self) -> int:
        """Re-read the persisted items and recompute the count"""
        try:
            items = self.persistence.load()
            count = sum(item.quantity for item in items)
        except (StorageError, CorruptCartDataError) as e:
            self.reporter.report(
                CartEvent(
                    kind=CartEventKind.READ_FAILED,
                    message="Cart badge reset to zero",
                    error=e,
                    context={"storage_key": self.persistence.key},
                )
            )
            count = 0

        changed = count != self.count
        self.count = count
        if changed:
            logger.debug(f"Cart badge count changed to {count}")
            if self.on_change is not None:
                self.on_change(count)
        return count

    @property
    def label(self) -> str:
        """Badge text, empty when the cart is empty"""
        if self.count <= 0:
            return ""
        if self.count > MAX_BADGE_COUNT:
            return f"{MAX_BADGE_COUNT}+"
        return str(self.count)

    @property
    def aria_label(self) -> str:
        return f"Shopping cart with {self.count} items"

    def click(self) -> None:
        """Ask the page's cart store to open or close its panel"""
        self.notifier.publish(TOGGLE_CART)

    def close(self) -> None:
        self._unsubscribe()
