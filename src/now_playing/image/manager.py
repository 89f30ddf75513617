"""Cover image render state and the per-frame state machine."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
import logging
import os
from pathlib import Path
import sys
from typing import Mapping, MutableMapping, Optional, TextIO

from PIL import Image
from typing_extensions import TypeAlias

from now_playing.config import AppConfig, Theme
from now_playing.errors import ImagePaintError, ImageRenderError
from now_playing.image.janitor import TEMP_FILE_MARKER, remove_temp_files
from now_playing.image.painters import ImagePainter, build_painter
from now_playing.image.protocols import (
    DISABLE_BLOCKS_ENV,
    ProtocolChoice,
    TerminalSignals,
    select_protocol,
)
from now_playing.ui.frame_buffer import FrameBuffer
from now_playing.ui.geometry import Rect

logger = logging.getLogger(__name__)

ImageCache: TypeAlias = Mapping[str, Image.Image]


class ImageRenderPhase(Enum):
    IDLE = "idle"
    STALE = "stale"
    CLEARED = "cleared"
    RENDERED = "rendered"


@dataclass
class ImageRenderState:
    """What the terminal currently shows in the cover image area."""

    url: str = ""
    render_area: Rect = field(default_factory=Rect)
    rendered: bool = False

    @property
    def phase(self) -> ImageRenderPhase:
        if not self.url:
            return ImageRenderPhase.IDLE
        if self.rendered:
            return ImageRenderPhase.RENDERED
        return ImageRenderPhase.CLEARED

    def matches(self, url: str, area: Rect) -> bool:
        return self.url == url and self.render_area == area


@dataclass(frozen=True)
class ImageCapability:
    """Image support available to this session.

    ``cell_pixels`` is the (width, height) of one terminal cell in pixels and
    sizes the bitmap handed to the painter.
    """

    sixel_supported: bool = True
    block_fallback: bool = False
    cell_pixels: tuple[int, int] = (10, 20)
    temp_dir: Optional[Path] = None


def crop_to_square(image: Image.Image) -> Image.Image:
    """Crop the centered square of an image."""
    width, height = image.size
    side = min(width, height)
    if width == height:
        return image.copy()
    left = (width - side) // 2
    top = (height - side) // 2
    return image.crop((left, top, left + side, top + side))


def pixel_box(area: Rect, config: AppConfig, cell_pixels: tuple[int, int]) -> int:
    """Side in pixels of the square bitmap painted into ``area``."""
    cols = min(config.cover_img_width, area.width)
    rows = min(config.cover_img_length, area.height)
    cell_w, cell_h = cell_pixels
    return max(1, min(cols * cell_w, rows * cell_h))


def prepare_cover(
    image: Image.Image, area: Rect, config: AppConfig, cell_pixels: tuple[int, int]
) -> Image.Image:
    side = pixel_box(area, config, cell_pixels)
    return crop_to_square(image).resize((side, side), resample=Image.Resampling.LANCZOS)


class CoverImageRenderer:
    """Paints the cover image and keeps :class:`ImageRenderState` honest.

    One instance lives for the whole UI session. :meth:`render` is called once
    per frame from the render path; it never raises for paint or cleanup
    failures, which are logged and retried on the next frame.
    """

    def __init__(
        self,
        capability: ImageCapability,
        signals: TerminalSignals,
        *,
        stream: Optional[TextIO] = None,
        environ: Optional[MutableMapping[str, str]] = None,
    ) -> None:
        self.capability = capability
        self._signals = signals
        self._stream = stream if stream is not None else sys.stdout
        self._environ = environ if environ is not None else os.environ
        self._painters: dict[ProtocolChoice, Optional[ImagePainter]] = {}

    @property
    def signals(self) -> TerminalSignals:
        return self._signals

    def protocol(self, config: AppConfig) -> ProtocolChoice:
        return select_protocol(
            config.image_protocol,
            self._signals,
            sixel_supported=self.capability.sixel_supported,
            block_fallback=self.capability.block_fallback or config.block_fallback,
        )

    def painter(self, config: AppConfig) -> Optional[ImagePainter]:
        choice = self.protocol(config)
        if choice not in self._painters:
            self._painters[choice] = build_painter(
                choice,
                self._stream,
                in_tmux=self._signals.in_tmux,
                temp_dir=self.capability.temp_dir,
            )
        return self._painters[choice]

    def classify(
        self, state: ImageRenderState, url: Optional[str], area: Rect
    ) -> ImageRenderPhase:
        """Return the phase the state is in with respect to this frame's target."""
        if not url:
            return ImageRenderPhase.IDLE
        if not state.matches(url, area):
            return ImageRenderPhase.STALE
        return state.phase

    def clear(
        self,
        frame: FrameBuffer,
        state: ImageRenderState,
        theme: Theme,
        painter: Optional[ImagePainter] = None,
    ) -> None:
        """Drop a rendered image and return the state to idle."""
        if not state.rendered:
            return
        if painter is not None:
            self._erase(painter)
        frame.clear_area(state.render_area, theme.app)
        state.url = ""
        state.render_area = Rect()
        state.rendered = False

    def render(
        self,
        frame: FrameBuffer,
        state: ImageRenderState,
        *,
        url: Optional[str],
        area: Rect,
        images: ImageCache,
        config: AppConfig,
        theme: Theme,
    ) -> ImageRenderPhase:
        """Advance the state machine by one frame and return the new phase."""
        painter = self.painter(config)
        if painter is None:
            self.clear(frame, state, theme)
            return state.phase

        phase = self.classify(state, url, area)
        if phase is ImageRenderPhase.IDLE:
            self.clear(frame, state, theme, painter)
            return state.phase

        if phase is ImageRenderPhase.STALE:
            logger.debug(
                "Cover image stale: %s at %s -> %s at %s",
                state.url,
                state.render_area,
                url,
                area,
            )
            if state.rendered:
                self._erase(painter)
            # both areas may still hold glyphs or pixels from earlier frames
            frame.clear_area(state.render_area, theme.app)
            frame.clear_area(area, theme.app)
            state.url = url or ""
            state.render_area = area
            state.rendered = False
            return state.phase

        if painter.writes_cells or not state.rendered:
            self._paint(frame, state, painter, images, config)
        if not painter.writes_cells:
            frame.protect(area)
        return state.phase

    def _paint(
        self,
        frame: FrameBuffer,
        state: ImageRenderState,
        painter: ImagePainter,
        images: ImageCache,
        config: AppConfig,
    ) -> None:
        try:
            remove_temp_files(TEMP_FILE_MARKER, self.capability.temp_dir)
        except ImageRenderError as exc:
            logger.error("Failed to render playback's cover image: %s", exc)
            return
        image = images.get(state.url)
        if image is None:
            return
        area = state.render_area
        cover = prepare_cover(image, area, config, self.capability.cell_pixels)
        if not state.rendered:
            logger.info(
                "Image render area: %dx%d at (%d,%d) via %s",
                area.width,
                area.height,
                area.x,
                area.y,
                painter.choice.value,
            )
        if painter.choice in (ProtocolChoice.KITTY, ProtocolChoice.ITERM):
            self._disable_blocks()
        try:
            painter.paint(cover, area, frame)
        except ImagePaintError as exc:
            logger.warning("Failed to print image: %s", exc)
            return
        state.rendered = True

    def _erase(self, painter: ImagePainter) -> None:
        try:
            painter.erase()
        except ImagePaintError as exc:
            logger.warning("Failed to erase image: %s", exc)

    def _disable_blocks(self) -> None:
        self._environ[DISABLE_BLOCKS_ENV] = "1"
        if not self._signals.blocks_disabled:
            self._signals = replace(self._signals, blocks_disabled=True)
