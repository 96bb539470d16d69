"""
Change notification

``ChangeNotifier`` carries payload-less signals between observers of the
cart. ``InProcessNotifier`` covers a single context (one page). The
``StorageEventNotifier`` additionally turns storage events raised by writes
in *other* contexts into ``cartUpdated`` signals for the watched key.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional

from .storage import ContextStorage, StorageEvent

logger = logging.getLogger(__name__)

CART_UPDATED = "cartUpdated"
TOGGLE_CART = "toggleCart"

Callback = Callable[[], None]
Unsubscribe = Callable[[], None]


class ChangeNotifier(ABC):
    """Named payload-less signals"""

    @abstractmethod
    def publish(self, event: str) -> None:
        ...

    @abstractmethod
    def subscribe(self, event: str, callback: Callback) -> Unsubscribe:
        ...


class InProcessNotifier(ChangeNotifier):
    """Synchronous pub/sub inside one context"""

    def __init__(self):
        self._subscribers: dict[str, list[Callback]] = {}

    def publish(self, event: str) -> None:
        for callback in list(self._subscribers.get(event, [])):
            try:
                callback()
            except Exception:
                logger.exception(f"Subscriber for {event!r} failed")

    def subscribe(self, event: str, callback: Callback) -> Unsubscribe:
        self._subscribers.setdefault(event, []).append(callback)

        def unsubscribe() -> None:
            callbacks = self._subscribers.get(event, [])
            if callback in callbacks:
                callbacks.remove(callback)

        return unsubscribe

    def subscriber_count(self, event: str) -> int:
        return len(self._subscribers.get(event, []))


class StorageEventNotifier(ChangeNotifier):
    """Cross-context notifier.

    Same-context signals go through an in-process notifier. Writes to
    ``watched_key`` made by other contexts sharing the storage area arrive as
    storage events and are republished locally as ``cartUpdated``. Publishing
    never touches storage: the storage event is raised by the write itself.
    """

    def __init__(
        self,
        storage: ContextStorage,
        watched_key: str,
        local: Optional[InProcessNotifier] = None,
    ):
        self.storage = storage
        self.watched_key = watched_key
        self.local = local or InProcessNotifier()
        self._remove_listener = storage.add_storage_listener(self._on_storage_event)

    def _on_storage_event(self, event: StorageEvent) -> None:
        if event.key != self.watched_key:
            return
        logger.debug(f"Cart key changed by context {event.source}")
        self.local.publish(CART_UPDATED)

    def publish(self, event: str) -> None:
        self.local.publish(event)

    def subscribe(self, event: str, callback: Callback) -> Unsubscribe:
        return self.local.subscribe(event, callback)

    def close(self) -> None:
        """Stop listening for storage events"""
        self._remove_listener()
