"""Small text helpers shared by the playback window renderers."""

from __future__ import annotations

from typing import Callable, Iterable, TypeVar

from bidi import get_display

T = TypeVar("T")


def _truncate_line(text: str, width: int) -> str:
    if width <= 0:
        return ""
    if len(text) <= width:
        return text
    if width == 1:
        return text[:1]
    return text[: width - 1] + "…"


def to_bidi_string(text: str) -> str:
    """Reorder mixed-direction text into display (visual) order."""
    if not text:
        return text
    return get_display(text)


def map_join(items: Iterable[T], fn: Callable[[T], str], sep: str) -> str:
    return sep.join(fn(item) for item in items)


def format_duration(duration_ms: int) -> str:
    """Format a duration as ``m:ss``."""
    total_seconds = max(0, duration_ms) // 1000
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes}:{seconds:02d}"
