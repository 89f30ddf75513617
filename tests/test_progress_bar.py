from __future__ import annotations

import pytest
from rich.style import Style

from now_playing.config import ProgressBarType, Theme
from now_playing.ui.frame_buffer import FrameBuffer
from now_playing.ui.geometry import Rect
from now_playing.ui.progress_bar import (
    LINE_FILLED,
    LINE_UNFILLED,
    playback_ratio,
    progress_label,
    progress_ms_from_ratio,
    ratio_from_click,
    render_playback_progress_bar,
)

THEME = Theme(
    playback_progress_bar=Style(color="green"),
    playback_progress_bar_unfilled=Style(color="red"),
)


@pytest.mark.parametrize(
    ("progress_ms", "duration_ms", "expected"),
    [
        (90_500, 180_000, 0.5),
        (-5_000, 180_000, 0.0),
        (300_000, 180_000, 1.0),
        (10_000, 0, 0.0),
        (10_000, 999, 0.0),
        (0, 180_000, 0.0),
    ],
)
def test_playback_ratio_is_clamped(
    progress_ms: int, duration_ms: int, expected: float
) -> None:
    assert playback_ratio(progress_ms, duration_ms) == expected


def test_progress_label() -> None:
    assert progress_label(65_000, 3_600_000) == "1:05/60:00"


def test_line_gauge_draws_label_then_bar() -> None:
    frame = FrameBuffer(20, 1)
    rect = render_playback_progress_bar(
        frame,
        Rect(0, 0, 20, 1),
        progress_ms=90_000,
        duration_ms=180_000,
        bar_type=ProgressBarType.LINE,
        theme=THEME,
    )
    assert rect == Rect(0, 0, 20, 1)
    line = frame.plain_lines()[0]
    assert line == "1:30/3:00 " + LINE_FILLED * 5 + LINE_UNFILLED * 5
    assert frame.cell(0, 0).style.bold
    assert frame.cell(10, 0).style == THEME.playback_progress_bar
    assert frame.cell(19, 0).style == THEME.playback_progress_bar_unfilled


def test_rectangle_gauge_centers_label_and_fills_cells() -> None:
    frame = FrameBuffer(11, 3)
    render_playback_progress_bar(
        frame,
        Rect(0, 0, 11, 3),
        progress_ms=1_000,
        duration_ms=2_000,
        bar_type=ProgressBarType.RECTANGLE,
        theme=THEME,
    )
    lines = frame.plain_lines()
    assert lines[0] == " " * 11
    assert lines[1] == " 0:01/0:02 "
    assert frame.cell(0, 0).style.reverse
    assert not frame.cell(10, 0).style.reverse
    assert frame.cell(1, 1).style.bold


def test_progress_past_the_end_is_shown_as_complete() -> None:
    frame = FrameBuffer(20, 1)
    render_playback_progress_bar(
        frame,
        Rect(0, 0, 20, 1),
        progress_ms=500_000,
        duration_ms=180_000,
        bar_type=ProgressBarType.LINE,
        theme=THEME,
    )
    assert frame.plain_lines()[0] == "3:00/3:00 " + LINE_FILLED * 10


def test_empty_rect_draws_nothing() -> None:
    frame = FrameBuffer(5, 1)
    render_playback_progress_bar(
        frame,
        Rect(0, 0, 0, 0),
        progress_ms=0,
        duration_ms=1_000,
        bar_type=ProgressBarType.RECTANGLE,
        theme=THEME,
    )
    assert frame.plain_lines() == ["     "]


@pytest.mark.parametrize(
    ("x", "expected"),
    [(10, 0.0), (15, 0.5), (20, 1.0), (3, 0.0), (40, 1.0)],
)
def test_ratio_from_click(x: int, expected: float) -> None:
    assert ratio_from_click(x, Rect(10, 5, 11, 1)) == expected


def test_ratio_from_click_on_single_cell_bar() -> None:
    assert ratio_from_click(4, Rect(4, 0, 1, 1)) == 0.0


def test_progress_ms_from_ratio_clamps() -> None:
    assert progress_ms_from_ratio(200_000, 0.25) == 50_000
    assert progress_ms_from_ratio(200_000, 2.0) == 200_000
    assert progress_ms_from_ratio(200_000, -1.0) == 0
