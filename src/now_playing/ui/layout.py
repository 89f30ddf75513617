"""Rectangle allocation for the playback window."""

from __future__ import annotations

from dataclasses import dataclass
import math

from now_playing.config import AppConfig, Position
from now_playing.ui.geometry import Rect, split_bottom, split_left, split_top

BORDER_ROWS = 2
IMAGE_SPACING = 1


@dataclass(frozen=True)
class PlaybackLayout:
    metadata: Rect
    cover_image: Rect | None
    progress_bar: Rect


def playback_window_height(config: AppConfig, image_enabled: bool) -> int:
    """Return the full window height, borders included."""
    height = config.playback_window_height
    if image_enabled:
        # cells are roughly twice as tall as wide, so a square cover needs
        # about width / 2 rows plus one row for the progress bar
        height = max(height, math.ceil(config.cover_img_width / 2) + 1)
    return height + BORDER_ROWS


def split_rect_for_playback_window(
    rect: Rect, config: AppConfig, image_enabled: bool
) -> tuple[Rect, Rect]:
    """Split ``rect`` into the playback window and the rest of the app."""
    height = playback_window_height(config, image_enabled)
    if config.playback_window_position is Position.TOP:
        return split_top(rect, height)
    rest, window = split_bottom(rect, height)
    return window, rest


def cover_image_rect(column: Rect, config: AppConfig) -> Rect:
    width = min(config.cover_img_width, column.width)
    # at least one row, but never past the column it sits in
    height = min(max(1, width // 2), config.cover_img_length, column.height)
    return Rect(column.x, column.y, width, height)


def split_playback_rect(
    rect: Rect, config: AppConfig, image_enabled: bool
) -> PlaybackLayout:
    """Allocate metadata, cover image and progress bar areas inside the window."""
    body, progress_bar = split_bottom(rect, 1)
    if not image_enabled:
        return PlaybackLayout(metadata=body, cover_image=None, progress_bar=progress_bar)
    column, metadata = split_left(body, config.cover_img_width, IMAGE_SPACING)
    return PlaybackLayout(
        metadata=metadata,
        cover_image=cover_image_rect(column, config),
        progress_bar=progress_bar,
    )
