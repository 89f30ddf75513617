"""Paint primitives for each terminal graphics protocol."""

from __future__ import annotations

import base64
import io
from pathlib import Path
import tempfile
from typing import Optional, Protocol, TextIO

from PIL import Image
from rich.style import Style

from now_playing.errors import ImagePaintError
from now_playing.image.janitor import TEMP_FILE_MARKER
from now_playing.image.protocols import ProtocolChoice
from now_playing.ui.frame_buffer import FrameBuffer
from now_playing.ui.geometry import Rect

ESC = "\x1b"
ST = "\x1b\\"
SAVE_CURSOR = "\x1b7"
RESTORE_CURSOR = "\x1b8"
KITTY_IMAGE_ID = 4242
SIXEL_COLORS = 255
HALF_BLOCK = "▀"


class ImagePainter(Protocol):
    choice: ProtocolChoice
    writes_cells: bool

    def paint(self, image: Image.Image, area: Rect, frame: FrameBuffer) -> None: ...

    def erase(self) -> None: ...


def _cursor_to(area: Rect) -> str:
    return f"{ESC}[{area.y + 1};{area.x + 1}H"


def tmux_passthrough(payload: str) -> str:
    """Wrap an escape sequence so tmux forwards it to the outer terminal."""
    return f"{ESC}Ptmux;{payload.replace(ESC, ESC + ESC)}{ST}"


class EscapePainter:
    """Shared plumbing for protocols that write escape sequences."""

    choice = ProtocolChoice.NONE
    writes_cells = False

    def __init__(self, stream: TextIO, *, in_tmux: bool = False) -> None:
        self._stream = stream
        self._in_tmux = in_tmux

    def paint(self, image: Image.Image, area: Rect, frame: FrameBuffer) -> None:
        try:
            payload = self.encode(image, area)
        except (OSError, ValueError) as exc:
            raise ImagePaintError(f"encode image: {exc}") from exc
        self._write(
            f"{SAVE_CURSOR}{_cursor_to(area)}{self._wrap(payload)}{RESTORE_CURSOR}"
        )

    def erase(self) -> None:
        return None

    def encode(self, image: Image.Image, area: Rect) -> str:
        raise NotImplementedError

    def _wrap(self, payload: str) -> str:
        return tmux_passthrough(payload) if self._in_tmux else payload

    def _write(self, data: str) -> None:
        try:
            self._stream.write(data)
            self._stream.flush()
        except (OSError, ValueError) as exc:
            raise ImagePaintError(f"print image to the terminal: {exc}") from exc


def _png_bytes(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


class KittyPainter(EscapePainter):
    """Kitty graphics protocol, transmitting PNG data through a temp file."""

    choice = ProtocolChoice.KITTY

    def __init__(
        self,
        stream: TextIO,
        *,
        in_tmux: bool = False,
        temp_dir: Optional[Path] = None,
    ) -> None:
        super().__init__(stream, in_tmux=in_tmux)
        self._temp_dir = temp_dir

    def encode(self, image: Image.Image, area: Rect) -> str:
        try:
            with tempfile.NamedTemporaryFile(
                prefix=f"{TEMP_FILE_MARKER}.",
                suffix=".png",
                dir=self._temp_dir,
                delete=False,
            ) as handle:
                image.save(handle, format="PNG")
                path = handle.name
        except OSError as exc:
            raise ImagePaintError(f"write kitty temp file: {exc}") from exc
        encoded = base64.standard_b64encode(path.encode("utf-8")).decode("ascii")
        return (
            f"{ESC}_Ga=T,f=100,t=t,q=2,i={KITTY_IMAGE_ID},"
            f"c={area.width},r={area.height};{encoded}{ST}"
        )

    def erase(self) -> None:
        self._write(self._wrap(f"{ESC}_Ga=d,d=I,i={KITTY_IMAGE_ID},q=2{ST}"))


class ITermPainter(EscapePainter):
    """iTerm2 inline images (OSC 1337)."""

    choice = ProtocolChoice.ITERM

    def encode(self, image: Image.Image, area: Rect) -> str:
        data = _png_bytes(image)
        encoded = base64.standard_b64encode(data).decode("ascii")
        return (
            f"{ESC}]1337;File=inline=1;size={len(data)};"
            f"width={area.width};height={area.height};preserveAspectRatio=0:"
            f"{encoded}\x07"
        )


def _sixel_runs(bits: list[int]) -> str:
    out: list[str] = []
    idx = 0
    while idx < len(bits):
        value = bits[idx]
        run = 1
        while idx + run < len(bits) and bits[idx + run] == value:
            run += 1
        char = chr(63 + value)
        out.append(f"!{run}{char}" if run > 3 else char * run)
        idx += run
    return "".join(out)


def encode_sixel(image: Image.Image) -> str:
    """Encode an image as a DEC sixel sequence with a quantized palette."""
    indexed = image.convert("RGB").quantize(colors=SIXEL_COLORS)
    width, height = indexed.size
    palette = indexed.getpalette() or []
    pixels = indexed.load()

    bands: list[dict[int, list[int]]] = []
    used: set[int] = set()
    for top in range(0, height, 6):
        band: dict[int, list[int]] = {}
        for dy in range(min(6, height - top)):
            for x in range(width):
                color = pixels[x, top + dy]
                used.add(color)
                band.setdefault(color, [0] * width)[x] |= 1 << dy
        bands.append(band)

    parts = [f"{ESC}Pq", f'"1;1;{width};{height}']
    for color in sorted(used):
        r, g, b = palette[color * 3 : color * 3 + 3]
        parts.append(
            f"#{color};2;{r * 100 // 255};{g * 100 // 255};{b * 100 // 255}"
        )
    for band in bands:
        rows = (f"#{color}{_sixel_runs(bits)}" for color, bits in band.items())
        parts.append("$".join(rows))
        parts.append("-")
    parts.append(ST)
    return "".join(parts)


class SixelPainter(EscapePainter):
    choice = ProtocolChoice.SIXEL

    def encode(self, image: Image.Image, area: Rect) -> str:
        return encode_sixel(image)


class BlockPainter:
    """Half-block glyphs written into the frame buffer.

    The glyphs are ordinary cells, so they are redrawn on every frame
    instead of being protected.
    """

    choice = ProtocolChoice.BLOCK_FALLBACK
    writes_cells = True

    def paint(self, image: Image.Image, area: Rect, frame: FrameBuffer) -> None:
        if area.is_empty():
            return
        small = image.convert("RGB").resize(
            (area.width, area.height * 2), resample=Image.Resampling.LANCZOS
        )
        pixels = small.load()
        for row in range(area.height):
            for col in range(area.width):
                r1, g1, b1 = pixels[col, row * 2]
                r2, g2, b2 = pixels[col, row * 2 + 1]
                style = Style(
                    color=f"#{r1:02x}{g1:02x}{b1:02x}",
                    bgcolor=f"#{r2:02x}{g2:02x}{b2:02x}",
                )
                frame.set_cell(area.x + col, area.y + row, HALF_BLOCK, style)

    def erase(self) -> None:
        return None


def build_painter(
    choice: ProtocolChoice,
    stream: TextIO,
    *,
    in_tmux: bool = False,
    temp_dir: Optional[Path] = None,
) -> Optional[ImagePainter]:
    """Return the painter for ``choice``, or None when images are off."""
    if choice is ProtocolChoice.KITTY:
        return KittyPainter(stream, in_tmux=in_tmux, temp_dir=temp_dir)
    if choice is ProtocolChoice.ITERM:
        return ITermPainter(stream, in_tmux=in_tmux)
    if choice is ProtocolChoice.SIXEL:
        return SixelPainter(stream, in_tmux=in_tmux)
    if choice is ProtocolChoice.BLOCK_FALLBACK:
        return BlockPainter()
    return None
