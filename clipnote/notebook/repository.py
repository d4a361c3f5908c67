"""Repositories over the keyed store.

Each repository is stateless: every call reads the whole list for its key,
changes it and writes it back. Missing ids are ignored rather than reported.
Repositories do not check that a referenced notebook exists.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from clipnote.notebook.models import (
    ChatMessage,
    ChatRole,
    ContentItem,
    ContentMetadata,
    ContentType,
    Notebook,
    now_ms,
)
from clipnote.storage.store import KeyValueStore

logger = logging.getLogger("clipnote.notebook")

NOTEBOOKS_KEY = "notebooks"
CONTENT_KEY = "content"
CHAT_KEY = "chat-messages"

M = TypeVar("M", bound=BaseModel)

# Fields a partial update may never overwrite.
_FROZEN_FIELDS = frozenset({"id", "created_at"})


class _Collection(Generic[M]):
    key: str
    model: type[M]

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def _load(self) -> list[M]:
        return [self.model.model_validate(r) for r in self._store.get(self.key)]

    def _save(self, records: list[M]) -> None:
        self._store.set(self.key, [r.model_dump(mode="json") for r in records])

    def list_all(self) -> list[M]:
        return self._load()

    def get(self, record_id: str) -> M | None:
        for record in self._load():
            if record.id == record_id:  # type: ignore[attr-defined]
                return record
        return None

    def _merge(self, record_id: str, fields: dict[str, Any], stamp: str | None) -> bool:
        records = self._load()
        for i, record in enumerate(records):
            if record.id == record_id:  # type: ignore[attr-defined]
                merged = record.model_dump()
                merged.update({k: v for k, v in fields.items() if k not in _FROZEN_FIELDS})
                if stamp:
                    merged[stamp] = now_ms()
                records[i] = self.model.model_validate(merged)
                self._save(records)
                return True
        return False

    def _remove_where(self, predicate: Callable[[M], bool]) -> int:
        records = self._load()
        kept = [r for r in records if not predicate(r)]
        removed = len(records) - len(kept)
        if removed:
            self._save(kept)
        return removed


class NotebookRepository(_Collection[Notebook]):
    key = NOTEBOOKS_KEY
    model = Notebook

    def create(self, name: str, icon: str = "📓", color: str = "blue") -> Notebook:
        """Append a new notebook with a zero item count."""
        ts = now_ms()
        notebook = Notebook(name=name, icon=icon, color=color, created_at=ts, updated_at=ts)
        records = self._load()
        records.append(notebook)
        self._save(records)
        logger.info("Created notebook %s (%s)", notebook.id, name)
        return notebook

    def update(self, notebook_id: str, **fields: Any) -> None:
        self._merge(notebook_id, fields, "updated_at")

    def delete(self, notebook_id: str) -> None:
        if self._remove_where(lambda n: n.id == notebook_id):
            logger.info("Deleted notebook %s", notebook_id)

    def increment_item_count(self, notebook_id: str) -> None:
        self._adjust_count(notebook_id, 1)

    def decrement_item_count(self, notebook_id: str) -> None:
        self._adjust_count(notebook_id, -1)

    def set_item_count(self, notebook_id: str, count: int) -> None:
        self._merge(notebook_id, {"item_count": max(count, 0)}, "updated_at")

    def _adjust_count(self, notebook_id: str, delta: int) -> None:
        records = self._load()
        for notebook in records:
            if notebook.id == notebook_id:
                notebook.item_count = max(notebook.item_count + delta, 0)
                notebook.updated_at = now_ms()
                self._save(records)
                return

    def search(self, query: str) -> list[Notebook]:
        """Case-insensitive substring match on the notebook name."""
        needle = query.lower()
        return [n for n in self._load() if needle in n.name.lower()]


class ContentRepository(_Collection[ContentItem]):
    key = CONTENT_KEY
    model = ContentItem

    def add(
        self,
        notebook_id: str,
        type: ContentType | str,  # noqa: A002
        title: str,
        content: str,
        metadata: ContentMetadata | dict[str, Any] | None = None,
    ) -> ContentItem:
        """Prepend a new item, so listings come back newest-first."""
        ts = now_ms()
        item = ContentItem.model_validate(
            {
                "notebook_id": notebook_id,
                "type": type,
                "title": title,
                "content": content,
                "metadata": metadata,
                "created_at": ts,
                "updated_at": ts,
            }
        )
        records = self._load()
        records.insert(0, item)
        self._save(records)
        logger.info("Added %s item %s to notebook %s", item.type, item.id, notebook_id)
        return item

    def update(self, item_id: str, **fields: Any) -> None:
        self._merge(item_id, fields, "updated_at")

    def delete(self, item_id: str) -> None:
        self._remove_where(lambda i: i.id == item_id)

    def list_by_notebook(self, notebook_id: str) -> list[ContentItem]:
        return [i for i in self._load() if i.notebook_id == notebook_id]

    def count_by_notebook(self, notebook_id: str) -> int:
        return len(self.list_by_notebook(notebook_id))

    def delete_by_notebook(self, notebook_id: str) -> int:
        return self._remove_where(lambda i: i.notebook_id == notebook_id)


class ChatRepository(_Collection[ChatMessage]):
    key = CHAT_KEY
    model = ChatMessage

    def append(self, notebook_id: str, role: ChatRole | str, content: str) -> ChatMessage:
        """Append a message; the log stays in chronological order."""
        message = ChatMessage.model_validate({"notebook_id": notebook_id, "role": role, "content": content})
        records = self._load()
        records.append(message)
        self._save(records)
        return message

    def list_by_notebook(self, notebook_id: str) -> list[ChatMessage]:
        return [m for m in self._load() if m.notebook_id == notebook_id]

    def clear_by_notebook(self, notebook_id: str) -> None:
        removed = self._remove_where(lambda m: m.notebook_id == notebook_id)
        if removed:
            logger.info("Cleared %d chat messages for notebook %s", removed, notebook_id)
