"""Bordered blocks and paragraphs drawn into a :class:`FrameBuffer`."""

from __future__ import annotations

import io
from typing import Iterable

from rich import box
from rich.console import Console
from rich.text import Text

from now_playing.config import Theme
from now_playing.ui.frame_buffer import FrameBuffer
from now_playing.ui.geometry import Rect
from now_playing.ui.text_helpers import _truncate_line

_WRAP_CONSOLE = Console(file=io.StringIO(), width=1000, color_system=None)


def render_block(frame: FrameBuffer, title: str, rect: Rect, theme: Theme) -> Rect:
    """Draw a titled box around ``rect`` and return the area inside it."""
    if rect.width < 2 or rect.height < 2:
        return Rect(rect.x, rect.y, 0, 0)
    edges = box.ROUNDED
    style = theme.border
    right = rect.right - 1
    bottom = rect.bottom - 1
    for x in range(rect.left + 1, right):
        frame.set_cell(x, rect.top, edges.top, style)
        frame.set_cell(x, bottom, edges.bottom, style)
    for y in range(rect.top + 1, bottom):
        frame.set_cell(rect.left, y, edges.mid_left, style)
        frame.set_cell(right, y, edges.mid_right, style)
    frame.set_cell(rect.left, rect.top, edges.top_left, style)
    frame.set_cell(right, rect.top, edges.top_right, style)
    frame.set_cell(rect.left, bottom, edges.bottom_left, style)
    frame.set_cell(right, bottom, edges.bottom_right, style)
    if title:
        frame.set_text(
            rect.left + 1,
            rect.top,
            Text(_truncate_line(title, rect.width - 2), style=theme.block_title),
            rect.width - 2,
        )
    return rect.inner()


def render_paragraph(
    frame: FrameBuffer, rect: Rect, lines: Iterable[Text], *, wrap: bool = False
) -> None:
    """Write lines top to bottom, truncating (or wrapping) to the rect width."""
    if rect.is_empty():
        return
    rows: list[Text] = []
    for line in lines:
        if not wrap:
            rows.append(line)
            continue
        for part in line.wrap(_WRAP_CONSOLE, rect.width):
            part.rstrip()
            rows.append(part)
    for offset, row in enumerate(rows[: rect.height]):
        frame.set_text(rect.x, rect.y + offset, row, rect.width)
