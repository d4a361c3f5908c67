"""Prompt assembly for notebook chat."""

from __future__ import annotations

from clipnote.notebook.models import ContentItem

_CHAT_PROMPT = """\
You are an AI assistant helping with a knowledge base called "{notebook_name}".

The user has the following content in this notebook:
{context}

User question: {question}

Please provide a helpful response based on the content in this notebook. \
If the question relates to specific content, reference it. \
If there's no relevant content, suggest ways the user could add relevant information \
to help answer their question."""


def build_context_block(items: list[ContentItem]) -> str:
    """One block per item, in the order given, each closed by a --- line."""
    return "\n".join(f"Title: {item.title}\nType: {item.type.value}\nContent: {item.content}\n---" for item in items)


def build_chat_prompt(notebook_name: str, items: list[ContentItem], question: str) -> str:
    return _CHAT_PROMPT.format(
        notebook_name=notebook_name,
        context=build_context_block(items),
        question=question,
    )
