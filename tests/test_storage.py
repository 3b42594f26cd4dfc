"""
Tests for the key-value stores.
"""

import json
import os

import pytest

from multiglot.storage.base import StorageKeys
from multiglot.storage.local import InMemoryStore, JsonFileStore, create_local_store


class TestInMemoryStore:
    def test_round_trip(self):
        store = InMemoryStore()

        store.set(StorageKeys.SELECTED_TAB, {"tab": "history"})

        assert store.get(StorageKeys.SELECTED_TAB) == {"tab": "history"}
        assert store.get_raw(StorageKeys.SELECTED_TAB) == '{"tab": "history"}'

    def test_missing_key(self):
        assert InMemoryStore().get("translate:nothing") is None

    def test_invalid_json_reads_as_missing(self):
        store = InMemoryStore({StorageKeys.SETTINGS: "{broken"})

        assert store.get(StorageKeys.SETTINGS) is None

    def test_remove(self):
        store = InMemoryStore()
        store.set("a", 1)

        store.remove("a")
        store.remove("never-set")

        assert store.keys() == []

    def test_non_ascii_kept(self):
        store = InMemoryStore()

        store.set("greeting", "¡Hola, señor!")

        assert "señor" in store.get_raw("greeting")


class TestJsonFileStore:
    def test_persists_across_instances(self, tmp_path):
        path = tmp_path / "store.json"
        JsonFileStore(path).set(StorageKeys.HISTORY, [{"input": "Hello"}])

        assert JsonFileStore(path).get(StorageKeys.HISTORY) == [{"input": "Hello"}]

    def test_file_maps_keys_to_strings(self, tmp_path):
        path = tmp_path / "store.json"
        JsonFileStore(path).set("k", {"a": 1})

        on_disk = json.loads(path.read_text(encoding="utf-8"))

        assert on_disk == {"k": '{"a": 1}'}

    def test_remove_persists(self, tmp_path):
        path = tmp_path / "store.json"
        store = JsonFileStore(path)
        store.set("k", 1)

        store.remove("k")

        assert JsonFileStore(path).get("k") is None

    def test_unreadable_file_starts_empty(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("not json at all", encoding="utf-8")

        store = JsonFileStore(path)

        assert store.get("k") is None
        store.set("k", 1)
        assert JsonFileStore(path).get("k") == 1

    def test_non_object_file_starts_empty(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")

        assert JsonFileStore(path).get("0") is None

    def test_no_temp_files_left(self, tmp_path):
        store = JsonFileStore(tmp_path / "store.json")
        for n in range(3):
            store.set(f"k{n}", n)

        assert [p.name for p in tmp_path.iterdir()] == ["store.json"]

    def test_create_local_store(self, tmp_path):
        store = create_local_store(str(tmp_path / "data"))

        store.set("k", True)

        assert (tmp_path / "data" / "store.json").exists()

    def test_failed_write_keeps_previous_state(self, tmp_path, monkeypatch):
        path = tmp_path / "store.json"
        store = JsonFileStore(path)
        store.set("k", 1)

        def refuse(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", refuse)

        with pytest.raises(OSError):
            store.set("k", 2)
        with pytest.raises(OSError):
            store.remove("k")

        assert store.get("k") == 1
        assert JsonFileStore(path).get("k") == 1
        assert [p.name for p in tmp_path.iterdir()] == ["store.json"]

    def test_failed_first_write_leaves_nothing(self, tmp_path, monkeypatch):
        path = tmp_path / "store.json"
        store = JsonFileStore(path)

        def refuse(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", refuse)

        with pytest.raises(OSError):
            store.set("k", 1)

        assert store.get("k") is None
        assert not path.exists()


@pytest.mark.parametrize("value", [0, "", [], {}, None, False])
def test_falsy_values_round_trip(value):
    store = InMemoryStore()

    store.set("k", value)

    assert store.get("k") == value
