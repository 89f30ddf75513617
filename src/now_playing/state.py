"""Application state shared between the player thread and the renderer."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
import threading
from typing import Iterator

from PIL import Image

from now_playing.models import PlayerState, UserData


@dataclass
class DataCaches:
    """Decoded cover images keyed by url."""

    images: dict[str, Image.Image] = field(default_factory=dict)


@dataclass
class AppData:
    user_data: UserData = field(default_factory=UserData)
    caches: DataCaches = field(default_factory=DataCaches)


@dataclass
class SharedState:
    player: PlayerState = field(default_factory=PlayerState)
    data: AppData = field(default_factory=AppData)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    @contextmanager
    def read(self) -> Iterator["SharedState"]:
        """Hold the state lock for the duration of a render pass."""
        with self._lock:
            yield self

    @contextmanager
    def write(self) -> Iterator["SharedState"]:
        with self._lock:
            yield self
