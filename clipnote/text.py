"""Small text helpers for displaying and capturing content."""

from __future__ import annotations

import time
from datetime import datetime

from bs4 import BeautifulSoup


def format_timestamp(timestamp_ms: int, *, now_ms: int | None = None) -> str:
    """Render a millisecond timestamp relative to now ("5m ago", "2d ago")."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    diff = now_ms - timestamp_ms

    if diff < 60_000:
        return "Just now"
    if diff < 3_600_000:
        return f"{diff // 60_000}m ago"
    if diff < 86_400_000:
        return f"{diff // 3_600_000}h ago"
    if diff < 604_800_000:
        return f"{diff // 86_400_000}d ago"
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%Y-%m-%d")


def truncate_text(text: str, max_length: int = 100) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


def html_to_text(html: str) -> str:
    """Strip markup, keeping only the text content."""
    return BeautifulSoup(html, "html.parser").get_text()
