from __future__ import annotations

import json
from pathlib import Path

from weather_widget.storage.file import JsonFileStore
from weather_widget.storage.memory import MemoryStore


def test_memory_store_get_set_remove() -> None:
    store = MemoryStore()
    assert store.get("weatherFavorites") is None
    store.set("weatherFavorites", '["Oslo"]')
    assert store.get("weatherFavorites") == '["Oslo"]'
    store.remove("weatherFavorites")
    store.remove("weatherFavorites")
    assert store.get("weatherFavorites") is None


def test_file_store_persists_across_instances(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "store.json"
    first = JsonFileStore(path)
    first.set("weatherSearchHistory", '["Turku"]')
    first.set("cacheTimestamp", "1760000000000")
    first.remove("cacheTimestamp")

    second = JsonFileStore(path)
    assert second.get("weatherSearchHistory") == '["Turku"]'
    assert second.get("cacheTimestamp") is None
    assert json.loads(path.read_text(encoding="utf-8")) == {
        "weatherSearchHistory": '["Turku"]'
    }


def test_file_store_ignores_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonFileStore(path)
    assert store.get("weatherFavorites") is None

    store.set("weatherFavorites", "[]")
    assert JsonFileStore(path).get("weatherFavorites") == "[]"


def test_file_store_drops_non_string_values(tmp_path: Path) -> None:
    path = tmp_path / "store.json"
    path.write_text(json.dumps({"a": "1", "b": 2}), encoding="utf-8")
    store = JsonFileStore(path)
    assert store.get("a") == "1"
    assert store.get("b") is None
