"""Reading and writing the persisted cart items"""

import json
from typing import Iterable

from pydantic import TypeAdapter, ValidationError

from ..models.cart import LineItem
from .storage import KeyValueStorage

_ITEMS_ADAPTER = TypeAdapter(list[LineItem])


class CorruptCartDataError(Exception):
    """Persisted cart value is not a valid item list"""
    pass


def serialize_items(items: Iterable[LineItem]) -> str:
    """JSON array of items in the persisted shape"""
    return json.dumps([item.to_storage() for item in items])


def parse_items(raw: str) -> list[LineItem]:
    """Parse a persisted items list, raising ``CorruptCartDataError``"""
    try:
        return _ITEMS_ADAPTER.validate_json(raw)
    except ValidationError as e:
        raise CorruptCartDataError(f"Persisted cart does not match the item shape: {e}") from e


class CartPersistence:
    """Items list stored under one fixed key"""

    def __init__(self, storage: KeyValueStorage, key: str):
        self.storage = storage
        self.key = key

    def load(self) -> list[LineItem]:
        """Read the persisted items; an absent value is an empty list.

        Raises:
            StorageError: storage could not be read
            CorruptCartDataError: value is malformed
        """
        raw = self.storage.get_item(self.key)
        if raw is None:
            return []
        return parse_items(raw)

    def exists(self) -> bool:
        return self.storage.get_item(self.key) is not None

    def save(self, items: Iterable[LineItem]) -> None:
        """Overwrite the persisted items.

        Raises:
            StorageError: storage could not be written
        """
        self.storage.set_item(self.key, serialize_items(items))
