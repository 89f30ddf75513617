"""Configuration persistence for the now playing panel."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from rich.errors import StyleSyntaxError
from rich.style import Style

logger = logging.getLogger(__name__)

DEFAULT_PLAYBACK_FORMAT = "{status} {track} • {artists} {liked}\n{album}\n{metadata}"
DEFAULT_METADATA_FIELDS = ("repeat", "shuffle", "volume", "device")


class ProgressBarType(Enum):
    LINE = "Line"
    RECTANGLE = "Rectangle"


class Position(Enum):
    TOP = "Top"
    BOTTOM = "Bottom"


@dataclass(frozen=True)
class Theme:
    """Styles used by the playback window."""

    app: Style = field(default_factory=Style)
    border: Style = field(default_factory=lambda: Style(color="blue"))
    block_title: Style = field(default_factory=lambda: Style(color="magenta"))
    playback_status: Style = field(
        default_factory=lambda: Style(color="cyan", bold=True)
    )
    like: Style = field(default_factory=lambda: Style(color="bright_red"))
    playback_track: Style = field(default_factory=lambda: Style(bold=True))
    playback_artists: Style = field(default_factory=lambda: Style(color="cyan"))
    playback_album: Style = field(default_factory=lambda: Style(color="yellow"))
    playback_metadata: Style = field(
        default_factory=lambda: Style(color="bright_black")
    )
    playback_progress_bar: Style = field(default_factory=lambda: Style(color="green"))
    playback_progress_bar_unfilled: Style = field(
        default_factory=lambda: Style(color="bright_black")
    )


@dataclass(frozen=True)
class AppConfig:
    """Immutable user configuration loaded from disk."""

    play_icon: str = "▶"
    pause_icon: str = "▌▌"
    liked_icon: str = "♥"
    playback_format: str = DEFAULT_PLAYBACK_FORMAT
    playback_metadata_fields: tuple[str, ...] = DEFAULT_METADATA_FIELDS
    progress_bar_type: ProgressBarType = ProgressBarType.RECTANGLE
    playback_window_height: int = 6
    playback_window_position: Position = Position.TOP
    enable_cover_image: bool = True
    cover_img_width: int = 10
    cover_img_length: int = 9
    cover_img_pixels: tuple[int, int] = (10, 20)
    image_protocol: Optional[str] = None
    block_fallback: bool = False
    theme: Theme = field(default_factory=Theme)


def get_config_dir(app_name: str = "now-playing") -> Path:
    """Return the per-user config directory for the current platform."""
    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            root = Path(base)
        else:
            root = Path.home() / "AppData" / "Roaming"
        return _ensure_dir(root / app_name)
    elif os.name == "posix":
        if _is_macos():
            return _ensure_dir(
                Path.home() / "Library" / "Application Support" / app_name
            )
        base = os.environ.get("XDG_CONFIG_HOME")
        root = Path(base) if base else Path.home() / ".config"
        return _ensure_dir(root / app_name)
    else:
        return _ensure_dir(Path.home() / ".config" / app_name)


def get_config_path() -> Path:
    """Return the full config file path."""
    return get_config_dir() / "config.json"


def load_config() -> AppConfig:
    """Load configuration from disk, falling back to defaults on error."""
    path = get_config_path()
    if not path.exists():
        return AppConfig()
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        logger.exception("Failed to load config from %s", path)
        return AppConfig()
    if not isinstance(raw, dict):
        return AppConfig()
    return _config_from_mapping(raw)


def save_config(cfg: AppConfig) -> None:
    """Persist configuration to disk atomically."""
    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = path.with_suffix(".tmp")
    data = {
        "play_icon": cfg.play_icon,
        "pause_icon": cfg.pause_icon,
        "liked_icon": cfg.liked_icon,
        "playback_format": cfg.playback_format,
        "playback_metadata_fields": list(cfg.playback_metadata_fields),
        "progress_bar_type": cfg.progress_bar_type.value,
        "playback_window_height": cfg.playback_window_height,
        "playback_window_position": cfg.playback_window_position.value,
        "enable_cover_image": cfg.enable_cover_image,
        "cover_img_width": cfg.cover_img_width,
        "cover_img_length": cfg.cover_img_length,
        "cover_img_pixels": list(cfg.cover_img_pixels),
        "image_protocol": cfg.image_protocol,
        "block_fallback": cfg.block_fallback,
        "theme": {
            item.name: str(getattr(cfg.theme, item.name)) for item in fields(Theme)
        },
    }
    temp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    os.replace(temp_path, path)


def _ensure_dir(path: Path) -> Path:
    """Create the directory if needed and return the path."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def _is_macos() -> bool:
    """Return True when running on macOS."""
    return os.uname().sysname == "Darwin" if hasattr(os, "uname") else False


def _get_bool(raw: dict[str, Any], key: str, default: bool) -> bool:
    """Fetch a boolean value with fallback for invalid types."""
    value = raw.get(key, default)
    if isinstance(value, bool):
        return value
    return default


def _get_int(
    raw: dict[str, Any],
    key: str,
    default: int,
    *,
    min_value: int | None = None,
    max_value: int | None = None,
) -> int:
    """Fetch an integer value with optional clamping."""
    value = raw.get(key, default)
    if not isinstance(value, int) or isinstance(value, bool):
        value = default
    if min_value is not None:
        value = max(min_value, value)
    if max_value is not None:
        value = min(max_value, value)
    return value


def _get_str(
    raw: dict[str, Any],
    key: str,
    default: str,
    *,
    allow_empty: bool = False,
) -> str:
    """Fetch a string value, optionally allowing empty strings."""
    value = raw.get(key, default)
    if not isinstance(value, str):
        return default
    if not value and not allow_empty:
        return default
    return value


def _get_enum(raw: dict[str, Any], key: str, default: Enum) -> Any:
    value = raw.get(key)
    if not isinstance(value, str):
        return default
    for member in type(default):
        if member.value.lower() == value.lower():
            return member
    return default


def _theme_from_mapping(raw: Any) -> Theme:
    if not isinstance(raw, dict):
        return Theme()
    overrides: dict[str, Style] = {}
    for item in fields(Theme):
        value = raw.get(item.name)
        if not isinstance(value, str):
            continue
        try:
            overrides[item.name] = Style.parse(value)
        except StyleSyntaxError:
            logger.warning("Ignoring invalid style for %s: %r", item.name, value)
    return Theme(**overrides)


def _config_from_mapping(raw: dict[str, Any]) -> AppConfig:
    """Normalize raw JSON data into an AppConfig."""
    defaults = AppConfig()
    fields_raw = raw.get("playback_metadata_fields")
    if isinstance(fields_raw, list):
        metadata_fields = tuple(str(name) for name in fields_raw)
    else:
        metadata_fields = defaults.playback_metadata_fields
    pixels_raw = raw.get("cover_img_pixels")
    cover_img_pixels = defaults.cover_img_pixels
    if (
        isinstance(pixels_raw, list)
        and len(pixels_raw) == 2
        and all(isinstance(value, int) and value > 0 for value in pixels_raw)
    ):
        cover_img_pixels = (pixels_raw[0], pixels_raw[1])
    image_protocol = raw.get("image_protocol")
    if image_protocol is not None and not isinstance(image_protocol, str):
        image_protocol = None
    return AppConfig(
        play_icon=_get_str(raw, "play_icon", defaults.play_icon),
        pause_icon=_get_str(raw, "pause_icon", defaults.pause_icon),
        liked_icon=_get_str(raw, "liked_icon", defaults.liked_icon),
        playback_format=_get_str(
            raw, "playback_format", defaults.playback_format, allow_empty=True
        ),
        playback_metadata_fields=metadata_fields,
        progress_bar_type=_get_enum(
            raw, "progress_bar_type", defaults.progress_bar_type
        ),
        playback_window_height=_get_int(
            raw, "playback_window_height", defaults.playback_window_height, min_value=0
        ),
        playback_window_position=_get_enum(
            raw, "playback_window_position", defaults.playback_window_position
        ),
        enable_cover_image=_get_bool(
            raw, "enable_cover_image", defaults.enable_cover_image
        ),
        cover_img_width=_get_int(
            raw, "cover_img_width", defaults.cover_img_width, min_value=1
        ),
        cover_img_length=_get_int(
            raw, "cover_img_length", defaults.cover_img_length, min_value=1
        ),
        cover_img_pixels=cover_img_pixels,
        image_protocol=image_protocol,
        block_fallback=_get_bool(raw, "block_fallback", defaults.block_fallback),
        theme=_theme_from_mapping(raw.get("theme")),
    )
