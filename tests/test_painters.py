from __future__ import annotations

import base64
import io
from pathlib import Path

from PIL import Image
import pytest
from rich.style import Style

from now_playing.errors import ImagePaintError
from now_playing.image.janitor import TEMP_FILE_MARKER
from now_playing.image.painters import (
    HALF_BLOCK,
    RESTORE_CURSOR,
    SAVE_CURSOR,
    ST,
    BlockPainter,
    ITermPainter,
    KittyPainter,
    SixelPainter,
    build_painter,
    encode_sixel,
    tmux_passthrough,
)
from now_playing.image.protocols import ProtocolChoice
from now_playing.ui.frame_buffer import FrameBuffer
from now_playing.ui.geometry import Rect


class BrokenStream(io.StringIO):
    def write(self, data: str) -> int:
        raise OSError("terminal went away")


def _image(size=(4, 4), color="red") -> Image.Image:
    return Image.new("RGB", size, color)


def test_kitty_writes_temp_file_and_escape(tmp_path: Path) -> None:
    stream = io.StringIO()
    painter = KittyPainter(stream, temp_dir=tmp_path)
    painter.paint(_image(), Rect(2, 1, 3, 2), FrameBuffer(10, 5))

    out = stream.getvalue()
    header = "\x1b_Ga=T,f=100,t=t,q=2,i=4242,c=3,r=2;"
    assert out.startswith(SAVE_CURSOR + "\x1b[2;3H" + header)
    assert out.endswith(ST + RESTORE_CURSOR)

    encoded = out[len(SAVE_CURSOR + "\x1b[2;3H" + header) : -len(ST + RESTORE_CURSOR)]
    path = Path(base64.standard_b64decode(encoded).decode("utf-8"))
    assert path.parent == tmp_path
    assert TEMP_FILE_MARKER in path.name
    with Image.open(path) as written:
        assert written.size == (4, 4)


def test_kitty_temp_file_failure_is_a_paint_error(tmp_path: Path) -> None:
    painter = KittyPainter(io.StringIO(), temp_dir=tmp_path / "missing")
    with pytest.raises(ImagePaintError):
        painter.paint(_image(), Rect(0, 0, 2, 2), FrameBuffer(4, 4))


def test_kitty_erase_deletes_by_id() -> None:
    stream = io.StringIO()
    KittyPainter(stream).erase()
    assert stream.getvalue() == "\x1b_Ga=d,d=I,i=4242,q=2\x1b\\"


def test_iterm_inline_image() -> None:
    stream = io.StringIO()
    ITermPainter(stream).paint(_image(), Rect(0, 0, 4, 2), FrameBuffer(4, 2))
    out = stream.getvalue()
    assert "\x1b]1337;File=inline=1;" in out
    assert "width=4;height=2;preserveAspectRatio=0:" in out
    payload = out.split("preserveAspectRatio=0:", 1)[1].split("\x07", 1)[0]
    assert base64.standard_b64decode(payload).startswith(b"\x89PNG")


def test_tmux_passthrough_doubles_escapes() -> None:
    assert tmux_passthrough("\x1b]x") == "\x1bPtmux;\x1b\x1b]x\x1b\\"


def test_painter_wraps_payload_inside_tmux() -> None:
    stream = io.StringIO()
    ITermPainter(stream, in_tmux=True).paint(
        _image(), Rect(0, 0, 2, 2), FrameBuffer(2, 2)
    )
    out = stream.getvalue()
    assert "\x1bPtmux;\x1b\x1b]1337;" in out
    assert out.startswith(SAVE_CURSOR)
    assert out.endswith(RESTORE_CURSOR)


def test_write_failure_is_a_paint_error() -> None:
    painter = SixelPainter(BrokenStream())
    with pytest.raises(ImagePaintError, match="print image to the terminal"):
        painter.paint(_image(), Rect(0, 0, 2, 2), FrameBuffer(2, 2))


def test_encode_sixel_bands_and_palette() -> None:
    out = encode_sixel(_image((2, 7), "white"))
    assert out.startswith('\x1bPq"1;1;2;7')
    assert out.endswith(ST)
    assert ";2;100;100;100" in out
    # seven rows make one full band and one band with a single row
    assert out.count("-") == 2
    assert "~~" in out
    assert "@@" in out


def test_sixel_runs_are_compressed() -> None:
    out = encode_sixel(_image((10, 6), "black"))
    assert "!10~" in out


def test_block_painter_writes_half_blocks() -> None:
    image = Image.new("RGB", (2, 4))
    for x in range(2):
        image.putpixel((x, 0), (255, 0, 0))
        image.putpixel((x, 1), (0, 0, 255))
        image.putpixel((x, 2), (0, 255, 0))
        image.putpixel((x, 3), (0, 0, 0))
    frame = FrameBuffer(4, 4)
    BlockPainter().paint(image, Rect(1, 1, 2, 2), frame)

    assert frame.cell(1, 1).char == HALF_BLOCK
    assert frame.cell(1, 1).style == Style(color="#ff0000", bgcolor="#0000ff")
    assert frame.cell(2, 2).style == Style(color="#00ff00", bgcolor="#000000")
    assert frame.cell(0, 0).char == " "
    assert frame.protected_regions == ()


def test_block_painter_ignores_empty_area() -> None:
    frame = FrameBuffer(2, 2)
    BlockPainter().paint(_image(), Rect(0, 0, 0, 0), frame)
    assert frame.plain_lines() == ["  ", "  "]


def test_build_painter() -> None:
    stream = io.StringIO()
    assert build_painter(ProtocolChoice.NONE, stream) is None
    assert isinstance(build_painter(ProtocolChoice.KITTY, stream), KittyPainter)
    assert isinstance(build_painter(ProtocolChoice.ITERM, stream), ITermPainter)
    assert isinstance(build_painter(ProtocolChoice.SIXEL, stream), SixelPainter)
    block = build_painter(ProtocolChoice.BLOCK_FALLBACK, stream)
    assert isinstance(block, BlockPainter)
    assert block.writes_cells
