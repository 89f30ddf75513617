"""Pytest configuration for the now playing panel."""

from __future__ import annotations

import pytest

_SCRUBBED_ENV = (
    "TMUX",
    "TERM_PROGRAM",
    "TERM",
    "GHOSTTY_RESOURCES_DIR",
    "NOW_PLAYING_DISABLE_BLOCKS",
    "NOW_PLAYING_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _scrub_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _SCRUBBED_ENV:
        monkeypatch.delenv(name, raising=False)
