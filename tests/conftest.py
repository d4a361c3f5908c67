"""Shared test fixtures for clipnote tests."""

from __future__ import annotations

from collections.abc import Sequence

import pytest

from clipnote.capture.clipboard import ClipboardUnavailableError
from clipnote.library import Library
from clipnote.notebook.models import ContentType
from clipnote.storage.store import MemoryStore

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"


class FakeEntry:
    """A clipboard entry holding a fixed payload per MIME type."""

    def __init__(self, payloads: dict[str, bytes], failing: Sequence[str] = ()) -> None:
        self._payloads = payloads
        self._failing = set(failing)

    @property
    def types(self) -> Sequence[str]:
        return list(self._payloads)

    def get_type(self, mime: str) -> bytes:
        if mime in self._failing:
            raise ClipboardUnavailableError(f"permission denied for {mime}")
        return self._payloads[mime]


class FakeClipboard:
    """In-memory clipboard backend with switchable failures."""

    def __init__(
        self,
        entries: list[FakeEntry] | None = None,
        *,
        text: str = "",
        structured_fails: bool = False,
        text_fails: bool = False,
    ) -> None:
        self.entries = entries or []
        self.text = text
        self.structured_fails = structured_fails
        self.text_fails = text_fails
        self.text_reads = 0

    def read(self) -> list[FakeEntry]:
        if self.structured_fails:
            raise ClipboardUnavailableError("structured read not supported")
        return self.entries

    def read_text(self) -> str:
        self.text_reads += 1
        if self.text_fails:
            raise ClipboardUnavailableError("permission denied")
        return self.text

    def copy_text(self, text: str) -> None:
        """Simulate the user copying plain text."""
        self.text = text
        self.entries = [FakeEntry({"text/plain": text.encode()})]


def make_library() -> Library:
    return Library(MemoryStore())


@pytest.fixture
def library() -> Library:
    return make_library()


def add_item(library: Library, notebook_id: str, title: str, content: str = "body") -> None:
    library.content.add(notebook_id, ContentType.TEXT, title, content)
