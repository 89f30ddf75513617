"""Command-line interface: render the playback window for a saved snapshot."""

from __future__ import annotations

import argparse
from dataclasses import replace
import json
import logging
from pathlib import Path
import sys
import time
from typing import Any, Iterable, Optional

from PIL import Image, UnidentifiedImageError
from rich.console import Console

from now_playing.config import AppConfig, get_config_path, load_config, save_config
from now_playing.image.manager import CoverImageRenderer, ImageCapability
from now_playing.image.protocols import probe_terminal_signals
from now_playing.logging_setup import init_logging
from now_playing.models import item_image_url, snapshot_from_mapping
from now_playing.state import SharedState
from now_playing.ui.frame_buffer import FrameBuffer
from now_playing.ui.playback_window import render_playback_window
from now_playing.ui.state import UIState

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="now-playing", description="Render the now playing panel"
    )
    parser.add_argument(
        "snapshot", nargs="?", help="Path to a JSON playback snapshot"
    )
    parser.add_argument("--cover", default=None, help="Cover image for the item")
    parser.add_argument("--protocol", default=None, help="kitty, iterm or sixel")
    parser.add_argument("--width", type=int, default=None)
    parser.add_argument("--height", type=int, default=None)
    parser.add_argument(
        "--frames", type=int, default=2, help="Number of frames to render"
    )
    parser.add_argument("--interval", type=float, default=0.5)
    parser.add_argument("--no-image", action="store_true", help="Text only")
    parser.add_argument(
        "--init-config",
        action="store_true",
        help="Write the current config (or defaults) to disk and exit",
    )
    return parser


def _load_snapshot(path: Path) -> dict[str, Any]:
    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: expected a JSON object")
    return raw


def _build_state(raw: dict[str, Any], cover: Optional[str]) -> SharedState:
    state = SharedState()
    snapshot = snapshot_from_mapping(raw)
    with state.write():
        state.player.playback = snapshot
        liked = raw.get("liked_tracks", [])
        if isinstance(liked, list):
            state.data.user_data.saved_tracks = {str(uri) for uri in liked}
        url = item_image_url(snapshot.item) if snapshot.item else None
        if cover and url:
            try:
                with Image.open(cover) as image:
                    image.load()
                    state.data.caches.images[url] = image.copy()
            except (OSError, UnidentifiedImageError):
                logger.exception("Failed to load cover image %s", cover)
    return state


def run(
    state: SharedState,
    config: AppConfig,
    console: Console,
    *,
    width: int,
    height: int,
    frames: int,
    interval: float,
    image: bool = True,
) -> None:
    renderer = None
    if image and config.enable_cover_image:
        renderer = CoverImageRenderer(
            ImageCapability(cell_pixels=config.cover_img_pixels),
            probe_terminal_signals(),
            stream=console.file,
        )
    ui = UIState(theme=config.theme)
    frame = FrameBuffer(width, height)
    console.clear()
    for index in range(max(1, frames)):
        if index:
            time.sleep(interval)
        frame.reset()
        render_playback_window(
            frame, state, ui, frame.area, config=config, image_renderer=renderer
        )
        console.file.write(frame.render_ansi())
        console.file.flush()
    console.file.write(f"\x1b[{height};1H\n")
    console.file.flush()


def main(argv: Optional[Iterable[str]] = None) -> int:
    """Entry point for the CLI."""
    init_logging()
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.init_config:
        save_config(load_config())
        print(get_config_path())
        return 0
    if args.snapshot is None:
        parser.error("the snapshot argument is required")

    try:
        raw = _load_snapshot(Path(args.snapshot))
    except (OSError, ValueError) as exc:
        print(f"Cannot read snapshot: {exc}", file=sys.stderr)
        return 1

    config = load_config()
    if args.protocol:
        config = replace(config, image_protocol=args.protocol)
    state = _build_state(raw, args.cover)
    console = Console()
    width = args.width or console.size.width
    height = args.height or console.size.height
    run(
        state,
        config,
        console,
        width=width,
        height=height,
        frames=args.frames,
        interval=args.interval,
        image=not args.no_image,
    )
    logger.info("Rendered %d frames", args.frames)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
