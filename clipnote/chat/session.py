"""Chat orchestration: question in, notebook-grounded answer out."""

from __future__ import annotations

import asyncio
import logging

from clipnote.chat.completion import CompletionFn
from clipnote.chat.prompts import build_chat_prompt
from clipnote.core import Result
from clipnote.library import Library
from clipnote.notebook.models import ChatMessage, ChatRole

logger = logging.getLogger("clipnote.chat")

FAILURE_MESSAGE = "Failed to get AI response. Please try again."


class ChatSession:
    """Conversation with one notebook. Allows a single request in flight at a time."""

    def __init__(self, library: Library, notebook_id: str, complete: CompletionFn) -> None:
        self._library = library
        self.notebook_id = notebook_id
        self._complete = complete
        self._busy = False

    @property
    def busy(self) -> bool:
        return self._busy

    def messages(self) -> list[ChatMessage]:
        return self._library.chat.list_by_notebook(self.notebook_id)

    def clear(self) -> None:
        self._library.chat.clear_by_notebook(self.notebook_id)

    async def submit(self, question: str) -> Result[ChatMessage]:
        """Ask a question and return the assistant's reply.

        The user's message is stored before the model is called, so it
        survives a failed request. On failure no assistant message is stored
        and the result carries a single COMPLETION_ERROR.
        """
        result: Result[ChatMessage] = Result()
        question = question.strip()
        if not question:
            result.error("EMPTY_QUESTION", "Question must not be empty")
            return result
        if self._busy:
            result.error("BUSY", "A response is already being generated")
            return result

        notebook = self._library.notebooks.get(self.notebook_id)
        if notebook is None:
            result.error("NOT_FOUND", f"Notebook {self.notebook_id} not found")
            return result

        self._busy = True
        try:
            self._library.chat.append(self.notebook_id, ChatRole.USER, question)
            items = self._library.content.list_by_notebook(self.notebook_id)
            prompt = build_chat_prompt(notebook.name, items, question)
            logger.info("chat: notebook=%s items=%d question=%r", self.notebook_id, len(items), question)
            try:
                answer = await asyncio.to_thread(self._complete, prompt)
            except Exception as e:  # noqa: BLE001
                logger.error("Failed to get AI response: %s", e)
                result.error("COMPLETION_ERROR", FAILURE_MESSAGE, hint=str(e))
                return result
            result.data = self._library.chat.append(self.notebook_id, ChatRole.ASSISTANT, answer)
        finally:
            self._busy = False
        return result
