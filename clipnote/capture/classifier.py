"""Guess whether pasted text is a link, a code snippet or plain prose.

The guess only pre-fills the type of a capture; callers let the user change it.
"""

from __future__ import annotations

import re

from clipnote.notebook.models import ContentType

_URL_RE = re.compile(r"https?://\S+")

_CODE_PATTERNS = [
    re.compile(r"^(function|const|let|var|class|import|export|if|for|while)", re.MULTILINE),
    re.compile(r"^\s*[<>{}\[\]]", re.MULTILINE),
    re.compile(r"\A\s*#![/\w]+"),
    re.compile(r"/\*|\*/|//"),
]


def looks_like_link(text: str) -> bool:
    """True if the whole trimmed text is a single http(s) URL."""
    return _URL_RE.fullmatch(text.strip()) is not None


def looks_like_code(text: str) -> bool:
    return any(p.search(text) for p in _CODE_PATTERNS)


def detect_content_type(text: str) -> ContentType:
    """Classify text as link, script or text. First matching rule wins."""
    if looks_like_link(text):
        return ContentType.LINK
    if looks_like_code(text):
        return ContentType.SCRIPT
    return ContentType.TEXT
