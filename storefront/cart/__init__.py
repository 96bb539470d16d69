# Cart state, persistence and notification

from .reducer import (
    AddItem,
    RemoveItem,
    UpdateQuantity,
    ToggleOpen,
    Open,
    Close,
    Clear,
    LoadItems,
    CartAction,
    EMPTY_CART,
    cart_reducer,
    project_totals,
)
from .storage import (
    KeyValueStorage,
    MemoryStorage,
    JsonFileStorage,
    SharedStorageArea,
    ContextStorage,
    StorageEvent,
    StorageError,
    StorageQuotaExceededError,
    StorageUnavailableError,
    open_durable_storage,
)
from .persistence import CartPersistence, CorruptCartDataError
from .notifier import (
    CART_UPDATED,
    TOGGLE_CART,
    ChangeNotifier,
    InProcessNotifier,
    StorageEventNotifier,
)
from .events import CartEvent, CartEventKind, CartEventReporter, LoggingEventReporter
from .store import CartStore
from .badge import CartCountObserver

__all__ = [
    "AddItem",
    "RemoveItem",
    "UpdateQuantity",
    "ToggleOpen",
    "Open",
    "Close",
    "Clear",
    "LoadItems",
    "CartAction",
    "EMPTY_CART",
    "cart_reducer",
    "project_totals",
    "KeyValueStorage",
    "MemoryStorage",
    "JsonFileStorage",
    "SharedStorageArea",
    "ContextStorage",
    "StorageEvent",
    "StorageError",
    "StorageQuotaExceededError",
    "StorageUnavailableError",
    "open_durable_storage",
    "CartPersistence",
    "CorruptCartDataError",
    "CART_UPDATED",
    "TOGGLE_CART",
    "ChangeNotifier",
    "InProcessNotifier",
    "StorageEventNotifier",
    "CartEvent",
    "CartEventKind",
    "CartEventReporter",
    "LoggingEventReporter",
    "CartStore",
    "CartCountObserver",
]
