"""Errors raised while rendering the now playing panel."""

from __future__ import annotations


class ImageRenderError(RuntimeError):
    """Cover image could not be put on screen."""


class ImagePaintError(ImageRenderError):
    """Writing the image escape sequence to the terminal failed."""


class TempFileCleanupError(ImageRenderError):
    """Removing protocol temp files failed."""

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path
