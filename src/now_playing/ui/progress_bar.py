"""Playback progress gauge."""

from __future__ import annotations

from rich.style import Style
from rich.text import Text

from now_playing.config import ProgressBarType, Theme
from now_playing.ui.frame_buffer import FrameBuffer
from now_playing.ui.geometry import Rect
from now_playing.ui.text_helpers import format_duration

LINE_FILLED = "━"
LINE_UNFILLED = "─"
_LABEL_STYLE = Style(bold=True)


def playback_ratio(progress_ms: int, duration_ms: int) -> float:
    """Return elapsed / total in whole seconds, clamped to ``[0, 1]``."""
    # progress can briefly read negative or past the end between polls
    duration_s = duration_ms // 1000
    if duration_s <= 0:
        return 0.0
    progress_s = int(progress_ms / 1000)
    return max(0.0, min(1.0, progress_s / duration_s))


def progress_label(progress_ms: int, duration_ms: int) -> str:
    return f"{format_duration(progress_ms)}/{format_duration(duration_ms)}"


def ratio_from_click(x: int, rect: Rect) -> float:
    """Map an absolute column inside the progress bar to a 0..1 ratio."""
    if rect.width <= 1:
        return 0.0
    clamped = max(rect.left, min(x, rect.right - 1)) - rect.left
    return clamped / float(rect.width - 1)


def progress_ms_from_ratio(duration_ms: int, ratio: float) -> int:
    """Return a seek target in ms for a ratio of the item's duration."""
    return int(max(0.0, min(1.0, ratio)) * max(0, duration_ms))


def render_line_gauge(
    frame: FrameBuffer, rect: Rect, ratio: float, label: str, theme: Theme
) -> None:
    if rect.is_empty():
        return
    used = frame.set_text(rect.x, rect.y, Text(label, style=_LABEL_STYLE), rect.width)
    start = rect.x + used + 1 if used else rect.x
    width = max(0, rect.right - start)
    filled = int(round(ratio * width))
    line = Text()
    line.append(LINE_FILLED * filled, style=theme.playback_progress_bar)
    line.append(
        LINE_UNFILLED * (width - filled), style=theme.playback_progress_bar_unfilled
    )
    frame.set_text(start, rect.y, line, width)


def render_rectangle_gauge(
    frame: FrameBuffer, rect: Rect, ratio: float, label: str, theme: Theme
) -> None:
    if rect.is_empty():
        return
    filled = int(round(ratio * rect.width))
    filled_style = theme.playback_progress_bar + Style(reverse=True)
    label_start = rect.x + max(0, (rect.width - len(label)) // 2)
    label_row = rect.y + rect.height // 2
    for x, y in rect.cells():
        style = filled_style if x - rect.x < filled else theme.playback_progress_bar
        char = " "
        if y == label_row and label_start <= x < label_start + len(label):
            char = label[x - label_start]
            style = style + _LABEL_STYLE
        frame.set_cell(x, y, char, style)


def render_playback_progress_bar(
    frame: FrameBuffer,
    rect: Rect,
    *,
    progress_ms: int,
    duration_ms: int,
    bar_type: ProgressBarType,
    theme: Theme,
) -> Rect:
    """Draw the gauge and return the rect it occupies for seek mapping."""
    progress_ms = min(progress_ms, duration_ms)
    ratio = playback_ratio(progress_ms, duration_ms)
    label = progress_label(progress_ms, duration_ms)
    if bar_type is ProgressBarType.LINE:
        render_line_gauge(frame, rect, ratio, label, theme)
    else:
        render_rectangle_gauge(frame, rect, ratio, label, theme)
    return rect
