"""Tests for the keyed list stores."""

from __future__ import annotations

import json
from pathlib import Path

from clipnote.storage.store import JsonFileStore, MemoryStore


def test_memory_store_missing_key_is_empty() -> None:
    assert MemoryStore().get("notebooks") == []


def test_memory_store_returns_copies() -> None:
    store = MemoryStore()
    store.set("notebooks", [{"id": "a"}])
    fetched = store.get("notebooks")
    fetched.append({"id": "b"})
    fetched[0]["id"] = "changed"
    assert store.get("notebooks") == [{"id": "a"}]


def test_memory_store_initial_data() -> None:
    store = MemoryStore({"content": [{"id": "x"}]})
    assert store.get("content") == [{"id": "x"}]
    assert store.keys() == ["content"]


def test_json_store_round_trip(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path)
    store.set("chat-messages", [{"id": "m1", "content": "héllo"}])

    fresh = JsonFileStore(tmp_path)
    assert fresh.get("chat-messages") == [{"id": "m1", "content": "héllo"}]
    assert (tmp_path / "chat-messages.json").exists()


def test_json_store_no_tmp_leftover(tmp_path: Path) -> None:
    store = JsonFileStore(tmp_path)
    store.set("content", [])
    assert list(tmp_path.glob("*.tmp")) == []


def test_json_store_creates_directory(tmp_path: Path) -> None:
    target = tmp_path / "nested" / "data"
    JsonFileStore(target)
    assert target.is_dir()


def test_json_store_corrupt_file_reads_empty(tmp_path: Path) -> None:
    (tmp_path / "notebooks.json").write_text("{not json")
    assert JsonFileStore(tmp_path).get("notebooks") == []


def test_json_store_non_list_reads_empty(tmp_path: Path) -> None:
    (tmp_path / "notebooks.json").write_text(json.dumps({"id": "a"}))
    assert JsonFileStore(tmp_path).get("notebooks") == []
