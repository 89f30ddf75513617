"""Playback data consumed by the now playing panel."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union


class RepeatState(Enum):
    OFF = "off"
    TRACK = "track"
    CONTEXT = "context"

    @property
    def display_name(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: object) -> "RepeatState":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.OFF


@dataclass(frozen=True)
class Artist:
    name: str


@dataclass(frozen=True)
class Album:
    name: str
    image_urls: tuple[str, ...] = ()


@dataclass(frozen=True)
class Show:
    name: str
    publisher: str
    image_urls: tuple[str, ...] = ()


@dataclass(frozen=True)
class Track:
    name: str
    artists: tuple[Artist, ...]
    album: Album
    duration_ms: int
    explicit: bool = False
    uri: Optional[str] = None


@dataclass(frozen=True)
class Episode:
    name: str
    show: Show
    duration_ms: int
    explicit: bool = False
    image_urls: tuple[str, ...] = ()


PlayableItem = Union[Track, Episode]


@dataclass(frozen=True)
class PlaybackSnapshot:
    """Read-only view of the current playback."""

    item: Optional[PlayableItem]
    is_playing: bool = False
    progress_ms: int = 0
    repeat_state: RepeatState = RepeatState.OFF
    fake_track_repeat_state: bool = False
    shuffle_state: bool = False
    volume: Optional[int] = None
    mute_state: Optional[int] = None
    device_name: str = ""

    @property
    def duration_ms(self) -> int:
        return self.item.duration_ms if self.item is not None else 0


def item_image_url(item: PlayableItem) -> str | None:
    """Return the cover image url for a track or episode, if any."""
    if isinstance(item, Track):
        urls = item.album.image_urls
    else:
        urls = item.show.image_urls or item.image_urls
    return urls[0] if urls else None


def _str_tuple(raw: Any) -> tuple[str, ...]:
    if not isinstance(raw, list):
        return ()
    return tuple(str(value) for value in raw if value)


def _get_int(raw: dict[str, Any], key: str, default: int = 0) -> int:
    """Fetch an integer, accepting whole floats and falling back on junk."""
    value = raw.get(key, default)
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return default


def _get_optional_int(raw: dict[str, Any], key: str) -> Optional[int]:
    value = raw.get(key)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def _get_str(raw: dict[str, Any], key: str, default: str = "") -> str:
    value = raw.get(key, default)
    return value if isinstance(value, str) else default


def _get_bool(raw: dict[str, Any], key: str, default: bool = False) -> bool:
    value = raw.get(key, default)
    return value if isinstance(value, bool) else default


def _get_mapping(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key)
    return value if isinstance(value, dict) else {}


def _artists(raw: Any) -> tuple[Artist, ...]:
    if not isinstance(raw, list):
        return ()
    names: list[str] = []
    for artist in raw:
        if isinstance(artist, dict):
            artist = artist.get("name")
        if isinstance(artist, str) and artist:
            names.append(artist)
    return tuple(Artist(name=name) for name in names)


def _item_from_mapping(raw: dict[str, Any]) -> PlayableItem:
    if raw.get("type") == "episode":
        show = _get_mapping(raw, "show")
        return Episode(
            name=_get_str(raw, "name"),
            show=Show(
                name=_get_str(show, "name"),
                publisher=_get_str(show, "publisher"),
                image_urls=_str_tuple(show.get("images")),
            ),
            duration_ms=_get_int(raw, "duration_ms"),
            explicit=_get_bool(raw, "explicit"),
            image_urls=_str_tuple(raw.get("images")),
        )
    album = _get_mapping(raw, "album")
    uri = raw.get("uri")
    return Track(
        name=_get_str(raw, "name"),
        artists=_artists(raw.get("artists")),
        album=Album(
            name=_get_str(album, "name"),
            image_urls=_str_tuple(album.get("images")),
        ),
        duration_ms=_get_int(raw, "duration_ms"),
        explicit=_get_bool(raw, "explicit"),
        uri=uri if isinstance(uri, str) and uri else None,
    )


def snapshot_from_mapping(raw: dict[str, Any]) -> PlaybackSnapshot:
    """Build a snapshot from decoded JSON, as written by the CLI fixtures.

    Values of the wrong type fall back to their defaults, so a partly broken
    snapshot still renders.
    """
    item_raw = raw.get("item")
    item = _item_from_mapping(item_raw) if isinstance(item_raw, dict) else None
    return PlaybackSnapshot(
        item=item,
        is_playing=_get_bool(raw, "is_playing"),
        progress_ms=_get_int(raw, "progress_ms"),
        repeat_state=RepeatState.parse(raw.get("repeat_state", "off")),
        fake_track_repeat_state=_get_bool(raw, "fake_track_repeat_state"),
        shuffle_state=_get_bool(raw, "shuffle_state"),
        volume=_get_optional_int(raw, "volume"),
        mute_state=_get_optional_int(raw, "mute_state"),
        device_name=_get_str(raw, "device_name"),
    )


@dataclass
class PlayerState:
    playback: Optional[PlaybackSnapshot] = None


@dataclass
class UserData:
    saved_tracks: set[str] = field(default_factory=set)
