"""Session-scoped UI state for the playback window."""

from __future__ import annotations

from dataclasses import dataclass, field

from now_playing.config import Theme
from now_playing.image.manager import ImageRenderState
from now_playing.ui.geometry import Rect


@dataclass
class UIState:
    theme: Theme = field(default_factory=Theme)
    last_cover_image_render_info: ImageRenderState = field(
        default_factory=ImageRenderState
    )
    # read by the input layer to map seek clicks onto the gauge
    playback_progress_bar_rect: Rect = field(default_factory=Rect)
