"""FastAPI server for clipnote."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncGenerator
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sse_starlette.sse import EventSourceResponse

from clipnote import __version__
from clipnote.capture.backends import CommandClipboard
from clipnote.capture.classifier import detect_content_type
from clipnote.capture.clipboard import ClipboardData, ClipboardMonitor, ClipboardService
from clipnote.capture.draft import draft_from_clipboard
from clipnote.chat.completion import AnthropicCompletion, CompletionFn
from clipnote.chat.session import ChatSession
from clipnote.config import data_dir, load_config
from clipnote.core import Diag, Result
from clipnote.library import Library
from clipnote.notebook.models import ContentMetadata, ContentType
from clipnote.storage.store import get_store

logger = logging.getLogger("clipnote.server")

app = FastAPI(title="clipnote", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_STATUS_BY_CODE = {
    "NOT_FOUND": 404,
    "INVALID_CONTENT": 400,
    "EMPTY_QUESTION": 400,
    "BUSY": 409,
    "COMPLETION_ERROR": 502,
    "CLIPBOARD_EMPTY": 404,
    "CLIPBOARD_UNAVAILABLE": 503,
}

# One chat session per notebook, so a second request waits its turn.
_sessions: dict[str, ChatSession] = {}


def get_library() -> Library:
    return Library(get_store(data_dir()))


def get_completion() -> CompletionFn:
    return AnthropicCompletion(load_config().llm)


def get_clipboard() -> ClipboardService:
    return ClipboardService(CommandClipboard())


def reset_sessions() -> None:
    """Forget all chat sessions (for testing)."""
    _sessions.clear()


def _session_for(library: Library, notebook_id: str) -> ChatSession:
    session = _sessions.get(notebook_id)
    if session is None:
        session = ChatSession(library, notebook_id, get_completion())
        _sessions[notebook_id] = session
    return session


def _error_response(diag: Diag | None) -> JSONResponse:
    if diag is None:
        return JSONResponse(status_code=500, content={"error": "Unknown error", "code": "UNKNOWN"})
    return JSONResponse(
        status_code=_STATUS_BY_CODE.get(diag.code, 500),
        content={"error": diag.message, "code": diag.code},
    )


def _not_found(what: str, item_id: str) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": f"{what} {item_id} not found", "code": "NOT_FOUND"})


def _dump(result: Result[Any]) -> Any:
    if not result.ok or result.data is None:
        return _error_response(result.first_error)
    return result.data.model_dump(mode="json")


@app.get("/api/health")
async def health() -> dict[str, Any]:
    return {"ok": True, "version": __version__}


# --- Notebooks ---


class CreateNotebookRequest(BaseModel):
    name: str
    icon: str | None = None
    color: str | None = None


class UpdateNotebookRequest(BaseModel):
    name: str | None = None
    icon: str | None = None
    color: str | None = None


@app.get("/api/notebooks")
async def list_notebooks(q: str = "") -> list[dict[str, Any]]:
    library = get_library()
    notebooks = library.notebooks.search(q) if q else library.notebooks.list_all()
    return [n.model_dump(mode="json") for n in notebooks]


@app.post("/api/notebooks", status_code=201)
async def create_notebook(request: CreateNotebookRequest) -> Any:
    if not request.name.strip():
        return JSONResponse(status_code=400, content={"error": "Name is required", "code": "INVALID_NOTEBOOK"})
    settings = load_config().settings
    notebook = get_library().notebooks.create(
        request.name.strip(),
        icon=request.icon or settings.default_icon,
        color=request.color or settings.default_color,
    )
    return notebook.model_dump(mode="json")


@app.get("/api/notebooks/{notebook_id}")
async def get_notebook(notebook_id: str) -> Any:
    notebook = get_library().notebooks.get(notebook_id)
    if notebook is None:
        return _not_found("Notebook", notebook_id)
    return notebook.model_dump(mode="json")


@app.patch("/api/notebooks/{notebook_id}")
async def update_notebook(notebook_id: str, request: UpdateNotebookRequest) -> Any:
    library = get_library()
    if library.notebooks.get(notebook_id) is None:
        return _not_found("Notebook", notebook_id)
    library.notebooks.update(notebook_id, **request.model_dump(exclude_none=True))
    return library.notebooks.get(notebook_id).model_dump(mode="json")  # type: ignore[union-attr]


@app.delete("/api/notebooks/{notebook_id}")
async def delete_notebook(notebook_id: str) -> Any:
    if get_library().delete_notebook(notebook_id):
        _sessions.pop(notebook_id, None)
        return {"ok": True}
    return _not_found("Notebook", notebook_id)


# --- Content ---


class AddContentRequest(BaseModel):
    title: str
    content: str
    type: ContentType | None = None
    tags: list[str] = []
    url: str | None = None
    language: str | None = None
    source: str = "api"


class UpdateContentRequest(BaseModel):
    title: str | None = None
    content: str | None = None
    type: ContentType | None = None
    tags: list[str] | None = None


@app.get("/api/notebooks/{notebook_id}/content")
async def list_content(notebook_id: str, q: str = "", type: ContentType | None = None) -> Any:  # noqa: A002
    library = get_library()
    if library.notebooks.get(notebook_id) is None:
        return _not_found("Notebook", notebook_id)
    items = library.search_content(notebook_id, q, type)
    return {
        "items": [item.model_dump(mode="json") for item in items],
        "counts": library.type_counts(notebook_id),
    }


@app.post("/api/notebooks/{notebook_id}/content", status_code=201)
async def add_content(notebook_id: str, request: AddContentRequest) -> Any:
    metadata = ContentMetadata(
        tags=request.tags or None,
        source=request.source,
        url=request.url,
        language=request.language,
    )
    content_type = request.type or detect_content_type(request.content)
    result = get_library().add_content(notebook_id, content_type, request.title, request.content, metadata)
    return _dump(result)


@app.patch("/api/content/{item_id}")
async def update_content(item_id: str, request: UpdateContentRequest) -> Any:
    library = get_library()
    item = library.content.get(item_id)
    if item is None:
        return _not_found("Content item", item_id)
    fields: dict[str, Any] = request.model_dump(exclude_none=True, exclude={"tags"})
    if request.tags is not None:
        metadata = item.metadata or ContentMetadata()
        fields["metadata"] = metadata.model_copy(update={"tags": request.tags or None}).model_dump()
    library.content.update(item_id, **fields)
    return library.content.get(item_id).model_dump(mode="json")  # type: ignore[union-attr]


@app.delete("/api/content/{item_id}")
async def delete_content(item_id: str) -> Any:
    if get_library().remove_content(item_id):
        return {"ok": True}
    return _not_found("Content item", item_id)


# --- Chat ---


class AskRequest(BaseModel):
    question: str


@app.get("/api/notebooks/{notebook_id}/chat")
async def get_chat(notebook_id: str) -> list[dict[str, Any]]:
    return [m.model_dump(mode="json") for m in get_library().chat.list_by_notebook(notebook_id)]


@app.post("/api/notebooks/{notebook_id}/chat")
async def ask(notebook_id: str, request: AskRequest) -> Any:
    logger.info("POST /api/notebooks/%s/chat question=%r", notebook_id, request.question)
    library = get_library()
    if library.notebooks.get(notebook_id) is None:
        return _not_found("Notebook", notebook_id)
    session = _session_for(library, notebook_id)
    return _dump(await session.submit(request.question))


@app.delete("/api/notebooks/{notebook_id}/chat")
async def clear_chat(notebook_id: str) -> dict[str, bool]:
    get_library().chat.clear_by_notebook(notebook_id)
    return {"ok": True}


# --- Clipboard ---


@app.get("/api/clipboard")
async def read_clipboard() -> Any:
    result = await asyncio.to_thread(get_clipboard().read)
    return _dump(result)


@app.get("/api/clipboard/draft")
async def clipboard_draft() -> Any:
    result = await asyncio.to_thread(get_clipboard().read)
    if not result.ok or result.data is None:
        return _error_response(result.first_error)
    draft = draft_from_clipboard(result.data)
    if draft is None:
        return JSONResponse(status_code=404, content={"error": "No content found in clipboard", "code": "CLIPBOARD_EMPTY"})
    return draft.model_dump(mode="json")


@app.get("/api/clipboard/stream")
async def clipboard_stream() -> EventSourceResponse:
    """Stream clipboard changes while the client stays connected."""
    interval = load_config().settings.poll_interval_seconds
    monitor = ClipboardMonitor(get_clipboard(), interval=interval)

    async def _event_stream() -> AsyncGenerator[dict[str, str]]:
        queue: asyncio.Queue[ClipboardData] = asyncio.Queue()
        monitor.subscribe(queue.put_nowait)
        async with monitor:
            # The client opening the stream counts as the user interaction.
            monitor.notify_interaction()
            while True:
                data = await queue.get()
                yield {"event": "clipboard", "data": data.model_dump_json()}

    return EventSourceResponse(_event_stream())
