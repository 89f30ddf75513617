"""Render the playback window for one frame.

The window shows the current track or episode (formatted by
:mod:`now_playing.ui.playback_text`), an optional cover image painted by a
:class:`~now_playing.image.manager.CoverImageRenderer`, and a progress bar.
Everything is drawn into the caller's :class:`FrameBuffer`; pixel protocols
additionally write straight to the terminal while the frame is built.
"""

from __future__ import annotations

import logging
from typing import Optional

from rich.text import Text

from now_playing.config import AppConfig
from now_playing.image.manager import CoverImageRenderer
from now_playing.models import item_image_url
from now_playing.state import SharedState
from now_playing.ui.frame_buffer import FrameBuffer
from now_playing.ui.geometry import Rect
from now_playing.ui.layout import split_playback_rect, split_rect_for_playback_window
from now_playing.ui.playback_text import construct_playback_text
from now_playing.ui.progress_bar import render_playback_progress_bar
from now_playing.ui.state import UIState
from now_playing.ui.widgets import render_block, render_paragraph

logger = logging.getLogger(__name__)

NO_PLAYBACK_MESSAGE = (
    "No playback found. Please start a new playback.\n"
    "Make sure there is a running Spotify device and try to connect to one "
    "using the `SwitchDevice` command."
)


def render_playback_window(
    frame: FrameBuffer,
    state: SharedState,
    ui: UIState,
    rect: Rect,
    *,
    config: AppConfig,
    image_renderer: Optional[CoverImageRenderer] = None,
) -> Rect:
    """Draw the playback window and return the area left for the rest of the UI."""
    image_enabled = image_renderer is not None and config.enable_cover_image
    window, other = split_rect_for_playback_window(rect, config, image_enabled)
    inner = render_block(frame, "Playback", window, ui.theme)

    with state.read():
        playback = state.player.playback
        item = playback.item if playback is not None else None
        if playback is not None and item is not None:
            layout = split_playback_rect(inner, config, image_enabled)
            if image_renderer is not None and layout.cover_image is not None:
                # no room for the cover: treat it like an item without one
                url = None if layout.cover_image.is_empty() else item_image_url(item)
                image_renderer.render(
                    frame,
                    ui.last_cover_image_render_info,
                    url=url,
                    area=layout.cover_image,
                    images=state.data.caches.images,
                    config=config,
                    theme=ui.theme,
                )
            lines = construct_playback_text(
                playback,
                item,
                config=config,
                theme=ui.theme,
                liked_tracks=state.data.user_data.saved_tracks,
            )
            render_paragraph(frame, layout.metadata, lines)
            ui.playback_progress_bar_rect = render_playback_progress_bar(
                frame,
                layout.progress_bar,
                progress_ms=playback.progress_ms,
                duration_ms=item.duration_ms,
                bar_type=config.progress_bar_type,
                theme=ui.theme,
            )
            return other

    # a leftover image would garble the message below
    if image_renderer is not None:
        image_renderer.clear(
            frame,
            ui.last_cover_image_render_info,
            ui.theme,
            image_renderer.painter(config),
        )
    render_paragraph(frame, inner, [Text(NO_PLAYBACK_MESSAGE)], wrap=True)
    return other
