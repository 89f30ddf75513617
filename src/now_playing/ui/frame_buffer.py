"""Cell buffer the playback window draws into, and its terminal flush."""

from __future__ import annotations

from dataclasses import dataclass
from itertools import groupby

from rich.cells import get_character_cell_size
from rich.style import Style
from rich.text import Text

from now_playing.ui.geometry import Rect


@dataclass
class Cell:
    char: str = " "
    style: Style = Style.null()


class FrameBuffer:
    """Grid of styled cells for one frame.

    Rectangles passed to :meth:`protect` are left alone by :meth:`render_ansi`
    so pixels painted there by an image protocol survive the flush. The
    protected set only lives for one frame; :meth:`reset` drops it.
    """

    def __init__(self, width: int, height: int) -> None:
        self.width = max(0, width)
        self.height = max(0, height)
        self._cells = [[Cell() for _ in range(self.width)] for _ in range(self.height)]
        self._protected: list[Rect] = []

    @property
    def area(self) -> Rect:
        return Rect(0, 0, self.width, self.height)

    @property
    def protected_regions(self) -> tuple[Rect, ...]:
        return tuple(self._protected)

    def reset(self) -> None:
        for row in self._cells:
            for cell in row:
                cell.char = " "
                cell.style = Style.null()
        self._protected.clear()

    def cell(self, x: int, y: int) -> Cell:
        return self._cells[y][x]

    def set_cell(self, x: int, y: int, char: str, style: Style | None = None) -> None:
        if not self.area.contains(x, y):
            return
        cell = self._cells[y][x]
        cell.char = char
        cell.style = style or Style.null()

    def set_text(self, x: int, y: int, text: Text, max_width: int) -> int:
        """Write one line of styled text, return the number of cells used."""
        used = 0
        limit = min(max_width, self.width - x)
        for span_text, style in _styled_chars(text):
            size = get_character_cell_size(span_text)
            if size == 0:
                continue
            if used + size > limit:
                break
            self.set_cell(x + used, y, span_text, style)
            if size == 2:
                self.set_cell(x + used + 1, y, "", style)
            used += size
        return used

    def fill(self, rect: Rect, char: str, style: Style | None = None) -> None:
        for x, y in rect.intersection(self.area).cells():
            self.set_cell(x, y, char, style)

    def clear_area(self, rect: Rect, style: Style | None = None) -> None:
        """Blank every cell of ``rect`` so the next flush overwrites it."""
        self.fill(rect, " ", style)

    def protect(self, rect: Rect) -> None:
        rect = rect.intersection(self.area)
        if not rect.is_empty():
            self._protected.append(rect)

    def is_protected(self, x: int, y: int) -> bool:
        return any(rect.contains(x, y) for rect in self._protected)

    def plain_lines(self) -> list[str]:
        return ["".join(cell.char for cell in row) for row in self._cells]

    def render_ansi(self, origin_x: int = 0, origin_y: int = 0) -> str:
        """Return escape sequences drawing every unprotected cell."""
        parts: list[str] = []
        for y, row in enumerate(self._cells):
            run: list[Cell] = []
            run_start = 0
            for x, cell in enumerate(row):
                if self.is_protected(x, y):
                    if run:
                        parts.append(_draw_run(run, origin_x + run_start, origin_y + y))
                        run = []
                    continue
                if not run:
                    run_start = x
                run.append(cell)
            if run:
                parts.append(_draw_run(run, origin_x + run_start, origin_y + y))
        return "".join(parts)


def _styled_chars(text: Text) -> list[tuple[str, Style]]:
    chars: list[tuple[str, Style]] = []
    for segment_text, style in _iter_segments(text):
        chars.extend((char, style) for char in segment_text)
    return chars


def _iter_segments(text: Text) -> list[tuple[str, Style]]:
    base = Style.parse(text.style) if isinstance(text.style, str) else text.style
    offsets = {span.start for span in text.spans} | {span.end for span in text.spans}
    segments: list[tuple[str, Style]] = []
    for part in text.divide(sorted(offsets)):
        style = base
        for span in part.spans:
            span_style = (
                Style.parse(span.style) if isinstance(span.style, str) else span.style
            )
            style = style + span_style
        segments.append((part.plain, style))
    return segments


def _draw_run(cells: list[Cell], x: int, y: int) -> str:
    out = [f"\x1b[{y + 1};{x + 1}H"]
    drawn = (cell for cell in cells if cell.char)
    for style, group in groupby(drawn, key=lambda cell: cell.style):
        chars = "".join(cell.char for cell in group)
        out.append(style.render(chars) if style else chars)
    return "".join(out)
