"""Cell rectangles and the splits used by the playback window."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle in terminal cell coordinates."""

    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    @property
    def left(self) -> int:
        return self.x

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def top(self) -> int:
        return self.y

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def contains(self, x: int, y: int) -> bool:
        return self.left <= x < self.right and self.top <= y < self.bottom

    def cells(self) -> Iterator[tuple[int, int]]:
        for y in range(self.top, self.bottom):
            for x in range(self.left, self.right):
                yield x, y

    def intersection(self, other: "Rect") -> "Rect":
        left = max(self.left, other.left)
        top = max(self.top, other.top)
        right = min(self.right, other.right)
        bottom = min(self.bottom, other.bottom)
        if right <= left or bottom <= top:
            return Rect(left, top, 0, 0)
        return Rect(left, top, right - left, bottom - top)

    def inner(self, margin: int = 1) -> "Rect":
        width = max(0, self.width - 2 * margin)
        height = max(0, self.height - 2 * margin)
        return Rect(self.x + margin, self.y + margin, width, height)


def split_top(rect: Rect, height: int) -> tuple[Rect, Rect]:
    """Split off ``height`` rows from the top; the rest goes below."""
    height = max(0, min(height, rect.height))
    head = Rect(rect.x, rect.y, rect.width, height)
    tail = Rect(rect.x, rect.y + height, rect.width, rect.height - height)
    return head, tail


def split_bottom(rect: Rect, height: int) -> tuple[Rect, Rect]:
    """Split off ``height`` rows from the bottom; return (rest, bottom)."""
    height = max(0, min(height, rect.height))
    rest = Rect(rect.x, rect.y, rect.width, rect.height - height)
    tail = Rect(rect.x, rect.y + rect.height - height, rect.width, height)
    return rest, tail


def split_left(rect: Rect, width: int, spacing: int = 0) -> tuple[Rect, Rect]:
    """Split off a ``width`` column, skip ``spacing`` columns, return both parts."""
    width = max(0, min(width, rect.width))
    gap = max(0, min(spacing, rect.width - width))
    head = Rect(rect.x, rect.y, width, rect.height)
    tail_x = rect.x + width + gap
    tail = Rect(tail_x, rect.y, max(0, rect.right - tail_x), rect.height)
    return head, tail
