"""Clipboard capture: one-shot structured reads and a polling change monitor."""

from __future__ import annotations

import asyncio
import base64
import inspect
import logging
from collections.abc import Callable, Sequence
from enum import StrEnum
from typing import Any, Protocol

from pydantic import BaseModel

from clipnote.core import Result

logger = logging.getLogger("clipnote.clipboard")

TEXT_MIME = "text/plain"
HTML_MIME = "text/html"


class ClipboardUnavailableError(Exception):
    """The clipboard could not be read (no tool, no permission, no display)."""


class ClipboardEntry(Protocol):
    @property
    def types(self) -> Sequence[str]: ...

    def get_type(self, mime: str) -> bytes: ...


class ClipboardBackend(Protocol):
    def read(self) -> Sequence[ClipboardEntry]: ...

    def read_text(self) -> str: ...


class ClipboardKind(StrEnum):
    TEXT = "text"
    IMAGE = "image"
    MIXED = "mixed"


class ClipboardData(BaseModel):
    text: str | None = None
    html: str | None = None
    image: str | None = None
    type: ClipboardKind = ClipboardKind.TEXT

    @property
    def is_empty(self) -> bool:
        return not (self.text or self.html or self.image)


def to_data_url(mime: str, payload: bytes) -> str:
    return f"data:{mime};base64,{base64.b64encode(payload).decode('ascii')}"


class ClipboardService:
    """Reads the host clipboard into ClipboardData.

    read() never raises: an unreadable clipboard comes back as a Result with
    a CLIPBOARD_UNAVAILABLE error and no data.
    """

    def __init__(self, backend: ClipboardBackend) -> None:
        self._backend = backend

    def read_text(self) -> str:
        return self._backend.read_text()

    def read(self) -> Result[ClipboardData]:
        result: Result[ClipboardData] = Result()
        try:
            entries = self._backend.read()
        except Exception as e:  # noqa: BLE001
            logger.error("Failed to read clipboard: %s", e)
            return self._read_text_fallback(result)

        data = ClipboardData()
        for entry in entries:
            self._extract(entry, data, result)

        if data.image is not None:
            data.type = ClipboardKind.MIXED if data.text else ClipboardKind.IMAGE
        if data.is_empty:
            result.error("CLIPBOARD_EMPTY", "No content found in clipboard")
            return result
        result.data = data
        return result

    def _extract(self, entry: ClipboardEntry, data: ClipboardData, result: Result[ClipboardData]) -> None:
        types = list(entry.types)

        if TEXT_MIME in types and data.text is None:
            try:
                data.text = entry.get_type(TEXT_MIME).decode("utf-8", errors="replace")
            except Exception as e:  # noqa: BLE001
                logger.warning("Failed to read text from clipboard: %s", e)
                result.warning("TEXT_READ_FAILED", f"Failed to read text: {e}")

        if HTML_MIME in types and data.html is None:
            try:
                data.html = entry.get_type(HTML_MIME).decode("utf-8", errors="replace")
            except Exception as e:  # noqa: BLE001
                logger.warning("Failed to read HTML from clipboard: %s", e)
                result.warning("HTML_READ_FAILED", f"Failed to read HTML: {e}")

        image_types = [t for t in types if t.startswith("image/")]
        if image_types and data.image is None:
            mime = image_types[0]
            try:
                data.image = to_data_url(mime, entry.get_type(mime))
            except Exception as e:  # noqa: BLE001
                logger.warning("Failed to read image from clipboard: %s", e)
                result.warning("IMAGE_READ_FAILED", f"Failed to read {mime}: {e}")

    def _read_text_fallback(self, result: Result[ClipboardData]) -> Result[ClipboardData]:
        try:
            text = self._backend.read_text()
        except Exception as e:  # noqa: BLE001
            logger.error("Fallback clipboard read also failed: %s", e)
            result.error("CLIPBOARD_UNAVAILABLE", "Failed to read clipboard", hint=str(e))
            return result
        if not text:
            result.error("CLIPBOARD_EMPTY", "No content found in clipboard")
            return result
        result.data = ClipboardData(text=text, type=ClipboardKind.TEXT)
        return result


Subscriber = Callable[[ClipboardData], Any]


class ClipboardMonitor:
    """Polls the clipboard text and publishes a full read whenever it changes.

    Polling starts on the first notify_interaction() and runs until stop().
    Errors while polling are not reported to subscribers.
    """

    def __init__(self, service: ClipboardService, *, interval: float = 1.0) -> None:
        self._service = service
        self._interval = interval
        self._subscribers: list[Subscriber] = []
        self._task: asyncio.Task[None] | None = None
        self._stopped = False
        self._last_text = ""
        self.latest: ClipboardData | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register an observer; returns a function that removes it."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def notify_interaction(self) -> None:
        """Start polling. Only the first call after construction has an effect."""
        if self._task is not None or self._stopped:
            return
        logger.info("Clipboard monitoring started (every %.1fs)", self._interval)
        self._task = asyncio.get_running_loop().create_task(self._run())

    def clear(self) -> None:
        self.latest = None

    async def poll_once(self) -> ClipboardData | None:
        """Take one sample; returns the published data if the clipboard changed."""
        try:
            text = await asyncio.to_thread(self._service.read_text)
        except Exception as e:  # noqa: BLE001
            logger.debug("Clipboard sample failed: %s", e)
            return None

        if text == self._last_text or not text:
            return None
        self._last_text = text

        result = await asyncio.to_thread(self._service.read)
        if not result.ok or result.data is None:
            return None
        await self._publish(result.data)
        return result.data

    async def _publish(self, data: ClipboardData) -> None:
        self.latest = data
        for callback in list(self._subscribers):
            try:
                outcome = callback(data)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception:
                logger.exception("Clipboard subscriber failed")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            await self.poll_once()

    async def stop(self) -> None:
        self._stopped = True
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
        logger.info("Clipboard monitoring stopped")

    async def __aenter__(self) -> ClipboardMonitor:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.stop()
