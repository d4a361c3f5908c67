"""Turn clipboard payloads into capture drafts and drafts into content items."""

from __future__ import annotations

from pydantic import BaseModel, Field

from clipnote.capture.classifier import detect_content_type
from clipnote.capture.clipboard import ClipboardData, ClipboardKind
from clipnote.notebook.models import ContentType
from clipnote.text import html_to_text

IMAGE_TITLE = "Captured Image"
FALLBACK_TITLE = "Captured Content"
MAX_TITLE_LENGTH = 100
CAPTURE_SOURCE = "manual_capture"


class CaptureDraft(BaseModel):
    """A pre-filled capture form. Every field may still be edited before saving."""

    title: str = ""
    content: str = ""
    type: ContentType = ContentType.TEXT
    tags: list[str] = Field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        return bool(self.title.strip() and self.content.strip())


def title_from_text(text: str) -> str:
    first_line = text.split("\n", 1)[0][:MAX_TITLE_LENGTH]
    return first_line or FALLBACK_TITLE


def draft_from_text(text: str) -> CaptureDraft:
    return CaptureDraft(title=title_from_text(text), content=text, type=detect_content_type(text))


def draft_from_clipboard(data: ClipboardData) -> CaptureDraft | None:
    """Pre-fill a draft from clipboard data; None if there is nothing usable.

    Images win only when the clipboard holds no text; HTML is reduced to its text.
    """
    if data.type == ClipboardKind.IMAGE and data.image:
        return CaptureDraft(title=IMAGE_TITLE, content=data.image, type=ContentType.IMAGE)
    if data.text:
        text = html_to_text(data.html) if data.html else data.text
        return draft_from_text(text)
    return None


def parse_tags(raw: str) -> list[str]:
    """Split a comma-separated tag string, dropping blanks."""
    return [tag.strip() for tag in raw.split(",") if tag.strip()]
