"""Compile the user's playback format string into styled lines.

The format string mixes literal text, newlines and ``{placeholder}`` tokens::

    "{status} {track} • {artists} {liked}\\n{album}\\n{metadata}"

Tokens are produced by :func:`tokenize_format` and resolved against the
current playback by :func:`construct_playback_text`. Each output line is a
:class:`rich.text.Text` whose spans keep the order in which they were
resolved. Unknown placeholders and ``{liked}`` on a track that is not saved
produce no span at all.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import re
from typing import Collection, Iterator, Optional, Union

from rich.style import Style
from rich.text import Text

from now_playing.config import AppConfig, Theme
from now_playing.models import Episode, PlaybackSnapshot, PlayableItem, Track
from now_playing.ui.text_helpers import map_join, to_bidi_string

_TOKEN_PATTERN = re.compile(r"\{.*?\}|\n")


class PlaceholderKind(Enum):
    STATUS = "status"
    LIKED = "liked"
    TRACK = "track"
    ARTISTS = "artists"
    ALBUM = "album"
    METADATA = "metadata"


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class Newline:
    pass


@dataclass(frozen=True)
class Placeholder:
    raw: str

    @property
    def kind(self) -> Optional[PlaceholderKind]:
        try:
            return PlaceholderKind(self.raw[1:-1])
        except ValueError:
            return None


FormatToken = Union[Literal, Newline, Placeholder]


def tokenize_format(format_str: str) -> Iterator[FormatToken]:
    """Split a format string into literal, newline and placeholder tokens."""
    ptr = 0
    for match in _TOKEN_PATTERN.finditer(format_str):
        start, end = match.span()
        if ptr < start:
            yield Literal(format_str[ptr:start])
        ptr = end
        if match.group(0) == "\n":
            yield Newline()
        else:
            yield Placeholder(match.group(0))
    if ptr < len(format_str):
        yield Literal(format_str[ptr:])


def _track_text(item: PlayableItem) -> str:
    name = to_bidi_string(item.name)
    return f"{name} (E)" if item.explicit else name


def _artists_text(item: PlayableItem) -> str:
    if isinstance(item, Track):
        return to_bidi_string(map_join(item.artists, lambda artist: artist.name, ", "))
    return item.show.publisher


def _album_text(item: PlayableItem) -> str:
    if isinstance(item, Episode):
        return to_bidi_string(item.show.name)
    return to_bidi_string(item.album.name)


def metadata_text(playback: PlaybackSnapshot, fields: Collection[str]) -> str:
    """Join the configured metadata fields with ``" | "``."""
    if playback.fake_track_repeat_state:
        repeat_value = "track (fake)"
    else:
        repeat_value = playback.repeat_state.display_name
    if playback.mute_state is not None:
        volume_value = f"{playback.mute_state}% (muted)"
    else:
        volume_value = f"{playback.volume or 0}%"

    parts: list[str] = []
    for field_name in fields:
        if field_name == "repeat":
            parts.append(f"repeat: {repeat_value}")
        elif field_name == "shuffle":
            parts.append(f"shuffle: {str(playback.shuffle_state).lower()}")
        elif field_name == "volume":
            parts.append(f"volume: {volume_value}")
        elif field_name == "device":
            parts.append(f"device: {playback.device_name}")
    return " | ".join(parts)


def resolve_placeholder(
    kind: Optional[PlaceholderKind],
    playback: PlaybackSnapshot,
    item: PlayableItem,
    *,
    config: AppConfig,
    theme: Theme,
    liked_tracks: Collection[str],
) -> Optional[tuple[str, Style]]:
    """Return the (text, style) for a placeholder, or None to skip it."""
    if kind is PlaceholderKind.STATUS:
        icon = config.play_icon if playback.is_playing else config.pause_icon
        return icon, theme.playback_status
    if kind is PlaceholderKind.LIKED:
        if isinstance(item, Track) and item.uri and item.uri in liked_tracks:
            return config.liked_icon, theme.like
        return None
    if kind is PlaceholderKind.TRACK:
        return _track_text(item), theme.playback_track
    if kind is PlaceholderKind.ARTISTS:
        return _artists_text(item), theme.playback_artists
    if kind is PlaceholderKind.ALBUM:
        return _album_text(item), theme.playback_album
    if kind is PlaceholderKind.METADATA:
        return (
            metadata_text(playback, config.playback_metadata_fields),
            theme.playback_metadata,
        )
    return None


def construct_playback_text(
    playback: PlaybackSnapshot,
    item: PlayableItem,
    *,
    config: AppConfig,
    theme: Theme,
    liked_tracks: Collection[str] = (),
    format_str: Optional[str] = None,
) -> list[Text]:
    """Build the styled lines shown next to the cover image."""
    if format_str is None:
        format_str = config.playback_format
    lines: list[Text] = []
    line = Text()
    pending = False
    for token in tokenize_format(format_str):
        if isinstance(token, Newline):
            lines.append(line)
            line = Text()
            pending = False
        elif isinstance(token, Literal):
            line.append(token.text)
            pending = True
        else:
            resolved = resolve_placeholder(
                token.kind,
                playback,
                item,
                config=config,
                theme=theme,
                liked_tracks=liked_tracks,
            )
            if resolved is not None:
                text, style = resolved
                line.append(text, style=style)
                pending = True
    if pending:
        lines.append(line)
    return lines
