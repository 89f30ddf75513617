"""Terminal graphics protocol selection."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
import os
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

DISABLE_BLOCKS_ENV = "NOW_PLAYING_DISABLE_BLOCKS"

SIXEL_TERMS = ("xterm", "mlterm", "foot", "wezterm", "contour", "mintty")


class ProtocolChoice(Enum):
    KITTY = "kitty"
    ITERM = "iterm"
    SIXEL = "sixel"
    BLOCK_FALLBACK = "blocks"
    NONE = "none"

    @property
    def is_pixel_protocol(self) -> bool:
        return self in (
            ProtocolChoice.KITTY,
            ProtocolChoice.ITERM,
            ProtocolChoice.SIXEL,
        )


@dataclass(frozen=True)
class TerminalSignals:
    """Environment hints used to guess the terminal's image support."""

    in_tmux: bool = False
    term_program: str = ""
    term: str = ""
    ghostty_resources: bool = False
    blocks_disabled: bool = False

    @property
    def is_ghostty(self) -> bool:
        return (
            self.term_program == "ghostty"
            or "ghostty" in self.term
            or self.ghostty_resources
        )

    @property
    def supports_sixel(self) -> bool:
        return any(name in self.term for name in SIXEL_TERMS) or (
            "wezterm" in self.term_program
        )


def probe_terminal_signals(
    environ: Optional[Mapping[str, str]] = None,
) -> TerminalSignals:
    """Collect :class:`TerminalSignals` from the process environment."""
    env = os.environ if environ is None else environ
    signals = TerminalSignals(
        in_tmux="TMUX" in env,
        term_program=env.get("TERM_PROGRAM", ""),
        term=env.get("TERM", ""),
        ghostty_resources="GHOSTTY_RESOURCES_DIR" in env,
        blocks_disabled=env.get(DISABLE_BLOCKS_ENV, "") not in ("", "0"),
    )
    logger.info(
        "Terminal detection: TMUX=%s, TERM_PROGRAM=%s, TERM=%s",
        signals.in_tmux,
        signals.term_program,
        signals.term,
    )
    return signals


def select_protocol(
    override: Optional[str],
    signals: TerminalSignals,
    *,
    sixel_supported: bool = True,
    block_fallback: bool = False,
) -> ProtocolChoice:
    """Pick the protocol used to paint cover images.

    An explicit ``override`` (``kitty``, ``iterm`` or ``sixel``) always wins.
    Otherwise sixel is preferred on terminals known to support it, then kitty
    for Ghostty and tmux sessions, where inline image detection is unreliable.
    With nothing detected the image is skipped unless ``block_fallback`` is
    set and no pixel protocol has disabled it.
    """
    if override:
        name = override.strip().lower()
        if name == "kitty":
            return ProtocolChoice.KITTY
        if name == "iterm":
            return ProtocolChoice.ITERM
        if name == "sixel" and sixel_supported:
            return ProtocolChoice.SIXEL
    if sixel_supported and signals.supports_sixel:
        return ProtocolChoice.SIXEL
    if signals.is_ghostty or signals.in_tmux:
        return ProtocolChoice.KITTY
    if block_fallback and not signals.blocks_disabled:
        return ProtocolChoice.BLOCK_FALLBACK
    return ProtocolChoice.NONE
