"""Tests for cross-collection operations on the library."""

from __future__ import annotations

from clipnote.capture.draft import CaptureDraft
from clipnote.library import Library
from clipnote.notebook.models import ChatRole, ContentType

from .conftest import add_item


def test_add_content_increments_count(library: Library) -> None:
    nb = library.notebooks.create("Notes")
    for i in range(3):
        result = library.add_content(nb.id, ContentType.TEXT, f"t{i}", "body")
        assert result.ok
    assert library.notebooks.get(nb.id).item_count == 3  # type: ignore[union-attr]
    assert library.content.count_by_notebook(nb.id) == 3


def test_add_content_unknown_notebook(library: Library) -> None:
    result = library.add_content("nb_missing", ContentType.TEXT, "t", "c")
    assert result.has_errors
    assert result.first_error is not None
    assert result.first_error.code == "NOT_FOUND"
    assert library.content.list_all() == []


def test_add_content_requires_title_and_content(library: Library) -> None:
    nb = library.notebooks.create("Notes")
    result = library.add_content(nb.id, ContentType.TEXT, "   ", "body")
    assert result.first_error is not None
    assert result.first_error.code == "INVALID_CONTENT"
    assert library.notebooks.get(nb.id).item_count == 0  # type: ignore[union-attr]


def test_add_content_trims(library: Library) -> None:
    nb = library.notebooks.create("Notes")
    result = library.add_content(nb.id, ContentType.TEXT, "  Title  ", "\n body \n")
    assert result.data is not None
    assert result.data.title == "Title"
    assert result.data.content == "body"


def test_capture_records_tags_and_source(library: Library) -> None:
    nb = library.notebooks.create("Snippets")
    draft = CaptureDraft(title="Loop", content="for x in y: pass", type=ContentType.SCRIPT, tags=["py", "loops"])
    result = library.capture(nb.id, draft)
    assert result.ok
    item = result.data
    assert item is not None
    assert item.type == ContentType.SCRIPT
    assert item.metadata is not None
    assert item.metadata.tags == ["py", "loops"]
    assert item.metadata.source == "manual_capture"


def test_capture_without_tags_stores_none(library: Library) -> None:
    nb = library.notebooks.create("Snippets")
    result = library.capture(nb.id, CaptureDraft(title="t", content="c"), source="clipboard_watch")
    assert result.data is not None
    assert result.data.metadata is not None
    assert result.data.metadata.tags is None
    assert result.data.metadata.source == "clipboard_watch"


def test_remove_content_decrements(library: Library) -> None:
    nb = library.notebooks.create("Notes")
    item = library.add_content(nb.id, ContentType.TEXT, "t", "c").data
    assert item is not None
    assert library.remove_content(item.id) is True
    assert library.notebooks.get(nb.id).item_count == 0  # type: ignore[union-attr]
    assert library.remove_content(item.id) is False


def test_delete_notebook_cascades(library: Library) -> None:
    doomed = library.notebooks.create("Doomed")
    kept = library.notebooks.create("Kept")
    add_item(library, doomed.id, "gone")
    add_item(library, kept.id, "stays")
    library.chat.append(doomed.id, ChatRole.USER, "bye")
    library.chat.append(kept.id, ChatRole.USER, "hi")

    assert library.delete_notebook(doomed.id) is True

    assert library.notebooks.get(doomed.id) is None
    assert library.content.list_by_notebook(doomed.id) == []
    assert library.chat.list_by_notebook(doomed.id) == []
    assert [i.title for i in library.content.list_by_notebook(kept.id)] == ["stays"]
    assert len(library.chat.list_by_notebook(kept.id)) == 1


def test_delete_missing_notebook(library: Library) -> None:
    assert library.delete_notebook("nb_missing") is False


def test_recount_repairs_drift(library: Library) -> None:
    nb = library.notebooks.create("Drifted")
    add_item(library, nb.id, "a")
    add_item(library, nb.id, "b")
    assert library.notebooks.get(nb.id).item_count == 0  # type: ignore[union-attr]
    assert library.recount(nb.id) == 2
    assert library.notebooks.get(nb.id).item_count == 2  # type: ignore[union-attr]


def test_search_content_by_text_and_type(library: Library) -> None:
    nb = library.notebooks.create("Mixed")
    library.add_content(nb.id, ContentType.LINK, "Python docs", "https://docs.python.org")
    library.add_content(nb.id, ContentType.SCRIPT, "Sort helper", "sorted(xs, key=len)")
    library.add_content(nb.id, ContentType.TEXT, "Shopping", "milk, eggs")

    assert [i.title for i in library.search_content(nb.id, "PYTHON")] == ["Python docs"]
    assert [i.title for i in library.search_content(nb.id, "key=")] == ["Sort helper"]
    assert [i.title for i in library.search_content(nb.id, type=ContentType.TEXT)] == ["Shopping"]
    assert library.search_content(nb.id, "python", ContentType.SCRIPT) == []
    assert len(library.search_content(nb.id)) == 3


def test_type_counts(library: Library) -> None:
    nb = library.notebooks.create("Mixed")
    library.add_content(nb.id, ContentType.LINK, "a", "https://a.example")
    library.add_content(nb.id, ContentType.LINK, "b", "https://b.example")
    library.add_content(nb.id, ContentType.TEXT, "c", "words")
    assert library.type_counts(nb.id) == {"link": 2, "text": 1}
