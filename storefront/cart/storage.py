"""
Durable key-value storage

Synchronous string get/set in the manner of browser local storage, plus a
shared storage area that several contexts (tabs, windows) can open. Writes
made through one context emit a ``StorageEvent`` to every *other* context,
never to the writer.
"""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Base exception for storage failures"""
    pass


class StorageQuotaExceededError(StorageError):
    """Write would exceed the storage quota"""
    pass


class StorageUnavailableError(StorageError):
    """Storage is disabled or cannot be reached"""
    pass


class KeyValueStorage(ABC):
    """String key-value storage"""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove_item(self, key: str) -> None:
        ...


class MemoryStorage(KeyValueStorage):
    """In-memory storage with an optional quota in bytes"""

    def __init__(self, quota_bytes: Optional[int] = None):
        self.data: dict[str, str] = {}
        self.quota_bytes = quota_bytes

    def get_item(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.quota_bytes is not None:
            used = sum(
                len(k.encode()) + len(v.encode())
                for k, v in self.data.items()
                if k != key
            )
            if used + len(key.encode()) + len(value.encode()) > self.quota_bytes:
                raise StorageQuotaExceededError(
                    f"Writing {key!r} exceeds quota of {self.quota_bytes} bytes"
                )
        self.data[key] = value

    def remove_item(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStorage(KeyValueStorage):
    """Storage persisted as one JSON object in a file.

    Writes go to a temporary file that replaces the target, so a crash never
    leaves a half-written file behind.
    """

    def __init__(self, path: os.PathLike):
        self.path = Path(path)

    def _read_all(self) -> dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except UnicodeDecodeError:
            logger.warning(f"Storage file {self.path} is not valid UTF-8, treating as empty")
            return {}
        except OSError as e:
            raise StorageUnavailableError(f"Cannot read {self.path}: {e}") from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Storage file {self.path} is not valid JSON, treating as empty")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Storage file {self.path} does not hold an object, treating as empty")
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, data: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        except OSError as e:
            raise StorageUnavailableError(f"Cannot write {self.path}: {e}") from e

        try:
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f)
                os.replace(tmp_path, self.path)
            except Exception:
                # Remove the temp file, ignoring a concurrent removal
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass
                raise
        except OSError as e:
            raise StorageUnavailableError(f"Cannot write {self.path}: {e}") from e

    def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove_item(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)


@dataclass(frozen=True)
class StorageEvent:
    """Change made to a shared storage area by another context"""
    key: str
    old_value: Optional[str]
    new_value: Optional[str]
    source: str


StorageListener = Callable[[StorageEvent], None]


class SharedStorageArea:
    """Storage shared by several contexts of the same origin.

    There is no locking between contexts: the last write wins.
    """

    def __init__(self, backend: Optional[KeyValueStorage] = None):
        self.backend = backend or MemoryStorage()
        self._contexts: list["ContextStorage"] = []

    def open_context(self, name: str) -> "ContextStorage":
        """Attach a new context (tab/window) to the area"""
        context = ContextStorage(self, name)
        self._contexts.append(context)
        return context

    def close_context(self, context: "ContextStorage") -> None:
        if context in self._contexts:
            self._contexts.remove(context)

    def _broadcast(self, writer: "ContextStorage", event: StorageEvent) -> None:
        for context in list(self._contexts):
            if context is not writer:
                context._dispatch(event)


class ContextStorage(KeyValueStorage):
    """One context's view of a ``SharedStorageArea``"""

    def __init__(self, area: SharedStorageArea, name: str):
        self.area = area
        self.name = name
        self._listeners: list[StorageListener] = []

    def get_item(self, key: str) -> Optional[str]:
        return self.area.backend.get_item(key)

    def set_item(self, key: str, value: str) -> None:
        old_value = self.area.backend.get_item(key)
        self.area.backend.set_item(key, value)
        self.area._broadcast(self, StorageEvent(key, old_value, value, self.name))

    def remove_item(self, key: str) -> None:
        old_value = self.area.backend.get_item(key)
        self.area.backend.remove_item(key)
        self.area._broadcast(self, StorageEvent(key, old_value, None, self.name))

    def add_storage_listener(self, listener: StorageListener) -> Callable[[], None]:
        """Listen for writes made by other contexts"""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _dispatch(self, event: StorageEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"Storage listener failed in context {self.name}")


def open_durable_storage(path: Optional[str] = None) -> KeyValueStorage:
    """File-backed storage when a path is configured, memory otherwise"""
    if path:
        return JsonFileStorage(path)
    logger.info("No cart storage path configured, cart will not survive restarts")
    return MemoryStorage()
