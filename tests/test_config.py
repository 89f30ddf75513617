"""Tests for config persistence."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest
from rich.style import Style

from now_playing import config


def test_load_defaults_when_missing(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(config, "get_config_dir", lambda: tmp_path)
    loaded = config.load_config()
    assert loaded == config.AppConfig()


def test_load_defaults_when_corrupt(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(config, "get_config_dir", lambda: tmp_path)
    (tmp_path / "config.json").write_text("{not-json", encoding="utf-8")
    loaded = config.load_config()
    assert loaded == config.AppConfig()


def test_load_defaults_when_not_a_mapping(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(config, "get_config_dir", lambda: tmp_path)
    (tmp_path / "config.json").write_text("[1, 2]", encoding="utf-8")
    assert config.load_config() == config.AppConfig()


def test_save_load_round_trip(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(config, "get_config_dir", lambda: tmp_path)
    original = config.AppConfig(
        play_icon=">",
        pause_icon="||",
        liked_icon="<3",
        playback_format="{track}\n{metadata}",
        playback_metadata_fields=("volume", "device"),
        progress_bar_type=config.ProgressBarType.LINE,
        playback_window_height=4,
        playback_window_position=config.Position.BOTTOM,
        cover_img_width=12,
        cover_img_length=6,
        cover_img_pixels=(8, 16),
        image_protocol="kitty",
        block_fallback=True,
        theme=config.Theme(playback_track=Style(color="red", italic=True)),
    )
    config.save_config(original)
    loaded = config.load_config()
    assert loaded == original


def test_save_config_atomic_write(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(config, "get_config_dir", lambda: tmp_path)
    replaced: list[tuple[Path, Path]] = []

    def fake_replace(src: Path, dest: Path) -> None:
        replaced.append((src, dest))
        assert src.exists()
        data = json.loads(src.read_text(encoding="utf-8"))
        assert "playback_format" in data
        dest.write_text(json.dumps(data), encoding="utf-8")

    monkeypatch.setattr(config.os, "replace", fake_replace)
    config.save_config(config.AppConfig())
    assert replaced
    src, dest = replaced[0]
    assert src.suffix == ".tmp"
    assert dest.name == "config.json"


def test_invalid_values_fall_back_to_defaults() -> None:
    cfg = config._config_from_mapping(
        {
            "play_icon": 3,
            "playback_window_height": "tall",
            "cover_img_width": -5,
            "progress_bar_type": "Dotted",
            "playback_window_position": "bottom",
            "playback_metadata_fields": "volume",
            "cover_img_pixels": [0, 20],
            "image_protocol": 7,
            "enable_cover_image": "yes",
        }
    )
    defaults = config.AppConfig()
    assert cfg.play_icon == defaults.play_icon
    assert cfg.playback_window_height == defaults.playback_window_height
    assert cfg.cover_img_width == 1
    assert cfg.progress_bar_type is defaults.progress_bar_type
    assert cfg.playback_window_position is config.Position.BOTTOM
    assert cfg.playback_metadata_fields == defaults.playback_metadata_fields
    assert cfg.cover_img_pixels == defaults.cover_img_pixels
    assert cfg.image_protocol is None
    assert cfg.enable_cover_image is True


def test_empty_format_string_is_allowed() -> None:
    cfg = config._config_from_mapping({"playback_format": ""})
    assert cfg.playback_format == ""


def test_invalid_theme_style_is_ignored() -> None:
    cfg = config._config_from_mapping(
        {"theme": {"like": "not a [style", "playback_album": "bold green"}}
    )
    assert cfg.theme.like == config.Theme().like
    assert cfg.theme.playback_album == Style(bold=True, color="green")


@pytest.mark.skipif(os.name != "posix", reason="XDG paths are POSIX only")
def test_config_dir_respects_xdg(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr(config, "_is_macos", lambda: False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert config.get_config_dir() == tmp_path / "now-playing"
    assert (tmp_path / "now-playing").is_dir()
