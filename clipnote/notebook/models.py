"""Persisted records: notebooks, content items and chat messages."""

from __future__ import annotations

import time
import uuid
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator


def generate_id(prefix: str = "") -> str:
    """Generate a process-unique id: prefix + 12 hex chars from uuid4."""
    return prefix + uuid.uuid4().hex[:12]


def now_ms() -> int:
    """Current time in milliseconds since the epoch."""
    return int(time.time() * 1000)


class ContentType(StrEnum):
    TEXT = "text"
    IMAGE = "image"
    SCRIPT = "script"
    LINK = "link"


class ChatRole(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"


class Notebook(BaseModel):
    id: str = Field(default_factory=lambda: generate_id("nb_"))
    name: str
    icon: str = "📓"
    color: str = "blue"
    created_at: int = Field(default_factory=now_ms)
    updated_at: int = Field(default_factory=now_ms)
    item_count: int = Field(default=0, ge=0)


class ContentMetadata(BaseModel):
    tags: list[str] | None = None
    source: str | None = None
    url: str | None = None
    language: str | None = None

    @field_validator("tags")
    @classmethod
    def _unique_tags(cls, tags: list[str] | None) -> list[str] | None:
        if tags is None:
            return None
        # dict keeps first-seen order
        return list(dict.fromkeys(tags))


class ContentItem(BaseModel):
    id: str = Field(default_factory=lambda: generate_id("item_"))
    notebook_id: str
    type: ContentType = ContentType.TEXT
    title: str
    content: str
    metadata: ContentMetadata | None = None
    created_at: int = Field(default_factory=now_ms)
    updated_at: int = Field(default_factory=now_ms)


class ChatMessage(BaseModel):
    id: str = Field(default_factory=lambda: generate_id("msg_"))
    notebook_id: str
    role: ChatRole
    content: str
    timestamp: int = Field(default_factory=now_ms)
