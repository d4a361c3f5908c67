"""The three repositories bound to one store, plus the operations that span them."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any

from clipnote.capture.draft import CAPTURE_SOURCE, CaptureDraft
from clipnote.core import Result
from clipnote.notebook.models import ContentItem, ContentMetadata, ContentType
from clipnote.notebook.repository import ChatRepository, ContentRepository, NotebookRepository
from clipnote.storage.store import KeyValueStore

logger = logging.getLogger("clipnote.library")


class Library:
    """Notebooks, their content and their chat logs.

    Unlike the bare repositories, the library checks that notebooks exist,
    keeps item_count in step when content is removed, and cascades notebook
    deletion to content and chat.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store
        self.notebooks = NotebookRepository(store)
        self.content = ContentRepository(store)
        self.chat = ChatRepository(store)

    def add_content(
        self,
        notebook_id: str,
        type: ContentType | str,  # noqa: A002
        title: str,
        content: str,
        metadata: ContentMetadata | dict[str, Any] | None = None,
    ) -> Result[ContentItem]:
        result: Result[ContentItem] = Result()
        if self.notebooks.get(notebook_id) is None:
            result.error("NOT_FOUND", f"Notebook {notebook_id} not found")
            return result
        if not title.strip() or not content.strip():
            result.error("INVALID_CONTENT", "Title and content are required")
            return result

        result.data = self.content.add(notebook_id, type, title.strip(), content.strip(), metadata)
        self.notebooks.increment_item_count(notebook_id)
        return result

    def capture(self, notebook_id: str, draft: CaptureDraft, *, source: str = CAPTURE_SOURCE) -> Result[ContentItem]:
        """Save a capture draft as a content item tagged with its source."""
        metadata = ContentMetadata(tags=draft.tags or None, source=source)
        return self.add_content(notebook_id, draft.type, draft.title, draft.content, metadata)

    def remove_content(self, item_id: str) -> bool:
        item = self.content.get(item_id)
        if item is None:
            return False
        self.content.delete(item_id)
        self.notebooks.decrement_item_count(item.notebook_id)
        return True

    def delete_notebook(self, notebook_id: str) -> bool:
        """Delete a notebook together with its content and chat history."""
        if self.notebooks.get(notebook_id) is None:
            return False
        removed = self.content.delete_by_notebook(notebook_id)
        self.chat.clear_by_notebook(notebook_id)
        self.notebooks.delete(notebook_id)
        logger.info("Deleted notebook %s with %d items", notebook_id, removed)
        return True

    def recount(self, notebook_id: str) -> int:
        """Recompute item_count from the content collection."""
        count = self.content.count_by_notebook(notebook_id)
        self.notebooks.set_item_count(notebook_id, count)
        return count

    def search_content(
        self,
        notebook_id: str,
        query: str = "",
        type: ContentType | str | None = None,  # noqa: A002
    ) -> list[ContentItem]:
        """Filter a notebook's items by case-insensitive text match and type."""
        needle = query.lower()
        items = self.content.list_by_notebook(notebook_id)
        return [
            item
            for item in items
            if (needle in item.title.lower() or needle in item.content.lower())
            and (type is None or item.type == type)
        ]

    def type_counts(self, notebook_id: str) -> dict[str, int]:
        counts = Counter(item.type.value for item in self.content.list_by_notebook(notebook_id))
        return dict(counts)
