"""Keyed list storage. Each key holds a whole list that is read and replaced at once."""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger("clipnote.storage")

Record = dict[str, Any]


class KeyValueStore(Protocol):
    def get(self, key: str) -> list[Record]: ...

    def set(self, key: str, records: list[Record]) -> None: ...


class MemoryStore:
    """In-process store. Returns copies so callers cannot mutate stored lists."""

    def __init__(self, initial: dict[str, list[Record]] | None = None) -> None:
        self._data: dict[str, list[Record]] = copy.deepcopy(initial) if initial else {}

    def get(self, key: str) -> list[Record]:
        return copy.deepcopy(self._data.get(key, []))

    def set(self, key: str, records: list[Record]) -> None:
        self._data[key] = copy.deepcopy(records)

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileStore:
    """Persists each key to {data_dir}/{key}.json."""

    def __init__(self, data_dir: Path) -> None:
        self._data_dir = data_dir
        self._data_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self._data_dir / f"{key}.json"

    def get(self, key: str) -> list[Record]:
        path = self._path(key)
        if not path.exists():
            return []
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logger.warning("Ignoring corrupt collection file: %s", path)
            return []
        if not isinstance(data, list):
            logger.warning("Collection file %s does not hold a list", path)
            return []
        return data

    def set(self, key: str, records: list[Record]) -> None:
        """Atomic write: write to .tmp, then rename."""
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(records, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        tmp_path.replace(path)
        logger.debug("Saved %s (%d records)", key, len(records))


_store: JsonFileStore | None = None


def get_store(data_dir: Path | None = None) -> JsonFileStore:
    """Get the module-level singleton store."""
    global _store  # noqa: PLW0603
    if _store is None:
        if data_dir is None:
            data_dir = Path.home() / ".clipnote" / "data"
        _store = JsonFileStore(data_dir)
    return _store


def reset_store() -> None:
    """Reset the singleton (for testing)."""
    global _store  # noqa: PLW0603
    _store = None
