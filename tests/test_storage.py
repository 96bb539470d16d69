"""Tests for storage adapters and persisted cart format."""

import json

import pytest

from storefront.cart.persistence import CartPersistence, CorruptCartDataError, parse_items, serialize_items
from storefront.cart.storage import (
    JsonFileStorage,
    MemoryStorage,
    SharedStorageArea,
    StorageQuotaExceededError,
    StorageUnavailableError,
    open_durable_storage,
)

from .conftest import CART_KEY, make_item


class TestMemoryStorage:
    def test_get_set_remove(self):
        storage = MemoryStorage()
        assert storage.get_item("k") is None
        storage.set_item("k", "v")
        assert storage.get_item("k") == "v"
        storage.remove_item("k")
        assert storage.get_item("k") is None

    def test_quota(self):
        storage = MemoryStorage(quota_bytes=8)
        storage.set_item("k", "1234567")
        with pytest.raises(StorageQuotaExceededError):
            storage.set_item("other", "x")
        assert storage.get_item("other") is None

    def test_overwrite_does_not_count_old_value(self):
        storage = MemoryStorage(quota_bytes=8)
        storage.set_item("k", "1234567")
        storage.set_item("k", "7654321")
        assert storage.get_item("k") == "7654321"


class TestJsonFileStorage:
    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "storage" / "local.json"
        JsonFileStorage(path).set_item(CART_KEY, "[]")
        assert JsonFileStorage(path).get_item(CART_KEY) == "[]"
        assert json.loads(path.read_text()) == {CART_KEY: "[]"}

    def test_missing_file_is_empty(self, tmp_path):
        assert JsonFileStorage(tmp_path / "absent.json").get_item(CART_KEY) is None

    def test_garbage_file_is_empty(self, tmp_path):
        path = tmp_path / "local.json"
        path.write_text("not json")
        storage = JsonFileStorage(path)
        assert storage.get_item(CART_KEY) is None
        storage.set_item(CART_KEY, "[]")
        assert storage.get_item(CART_KEY) == "[]"

    def test_non_utf8_file_is_empty(self, tmp_path):
        path = tmp_path / "local.json"
        path.write_bytes(b"\xff\xfe\x00garbage")
        storage = JsonFileStorage(path)
        assert storage.get_item(CART_KEY) is None
        storage.set_item(CART_KEY, "[]")
        assert storage.get_item(CART_KEY) == "[]"

    def test_failed_write_leaves_no_temp_file(self, tmp_path, monkeypatch):
        def failing_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr("storefront.cart.storage.os.replace", failing_replace)
        storage = JsonFileStorage(tmp_path / "local.json")
        with pytest.raises(StorageUnavailableError):
            storage.set_item(CART_KEY, "[]")
        assert list(tmp_path.iterdir()) == []

    def test_remove(self, tmp_path):
        storage = JsonFileStorage(tmp_path / "local.json")
        storage.set_item("a", "1")
        storage.set_item("b", "2")
        storage.remove_item("a")
        assert storage.get_item("a") is None
        assert storage.get_item("b") == "2"


class TestSharedStorageArea:
    def test_writer_does_not_receive_own_event(self):
        area = SharedStorageArea()
        tab_a = area.open_context("tab-a")
        tab_b = area.open_context("tab-b")
        seen_a, seen_b = [], []
        tab_a.add_storage_listener(seen_a.append)
        tab_b.add_storage_listener(seen_b.append)

        tab_a.set_item(CART_KEY, "[]")

        assert seen_a == []
        assert len(seen_b) == 1
        assert seen_b[0].key == CART_KEY
        assert seen_b[0].old_value is None
        assert seen_b[0].new_value == "[]"
        assert seen_b[0].source == "tab-a"

    def test_contexts_share_values_last_write_wins(self):
        area = SharedStorageArea()
        tab_a = area.open_context("tab-a")
        tab_b = area.open_context("tab-b")
        tab_a.set_item(CART_KEY, "a")
        tab_b.set_item(CART_KEY, "b")
        assert tab_a.get_item(CART_KEY) == "b"

    def test_closed_context_gets_no_events(self):
        area = SharedStorageArea()
        tab_a = area.open_context("tab-a")
        tab_b = area.open_context("tab-b")
        seen = []
        tab_b.add_storage_listener(seen.append)
        area.close_context(tab_b)
        tab_a.set_item(CART_KEY, "[]")
        assert seen == []

    def test_file_backed_area(self, tmp_path):
        area = SharedStorageArea(JsonFileStorage(tmp_path / "local.json"))
        area.open_context("tab-a").set_item(CART_KEY, "[]")
        assert JsonFileStorage(tmp_path / "local.json").get_item(CART_KEY) == "[]"


class TestOpenDurableStorage:
    def test_path_gives_file_storage(self, tmp_path):
        storage = open_durable_storage(str(tmp_path / "cart.json"))
        assert isinstance(storage, JsonFileStorage)

    def test_no_path_gives_memory_storage(self):
        assert isinstance(open_durable_storage(None), MemoryStorage)


class TestPersistedFormat:
    def test_wire_names(self):
        raw = serialize_items([make_item(color="Blue")])
        assert json.loads(raw) == [
            {"id": 1, "variantId": "tshirt-m", "quantity": 1, "size": "M", "color": "Blue",
             "price": 2500, "name": "Tee", "image": "/t.jpg"},
        ]

    def test_absent_color_omitted(self):
        assert "color" not in json.loads(serialize_items([make_item()]))[0]

    def test_parse_rejects_non_list(self):
        with pytest.raises(CorruptCartDataError):
            parse_items('{"id": 1}')

    def test_parse_rejects_bad_json(self):
        with pytest.raises(CorruptCartDataError):
            parse_items("[{")

    def test_load_absent_is_empty(self):
        persistence = CartPersistence(MemoryStorage(), CART_KEY)
        assert persistence.load() == []
        assert persistence.exists() is False

    def test_save_then_load(self):
        persistence = CartPersistence(MemoryStorage(), CART_KEY)
        items = [make_item(), make_item(product_id=2, variant_id="mug", size=None)]
        persistence.save(items)
        assert persistence.load() == items
