"""Cleanup of temp files left behind by image protocols."""

from __future__ import annotations

import logging
from pathlib import Path
import tempfile
from typing import Optional

from now_playing.errors import TempFileCleanupError

logger = logging.getLogger(__name__)

# Kitty only deletes files transmitted with t=t when the name carries
# "tty-graphics-protocol"; anything it has not consumed yet is ours to remove.
TEMP_FILE_MARKER = "tty-graphics-protocol.now_playing"


def remove_temp_files(
    marker: str = TEMP_FILE_MARKER, temp_dir: Optional[Path] = None
) -> int:
    """Delete files in the temp dir whose path contains ``marker``.

    Returns the number of files removed. I/O failures are raised as
    :class:`TempFileCleanupError`.
    """
    directory = Path(temp_dir) if temp_dir is not None else Path(tempfile.gettempdir())
    try:
        entries = list(directory.iterdir())
    except OSError as exc:
        raise TempFileCleanupError(
            f"remove temp files: cannot list {directory}", str(directory)
        ) from exc
    removed = 0
    for path in entries:
        if marker not in str(path) or path.is_dir():
            continue
        try:
            path.unlink()
        except FileNotFoundError:
            continue
        except OSError as exc:
            raise TempFileCleanupError(
                f"remove temp files: cannot delete {path}", str(path)
            ) from exc
        removed += 1
    if removed:
        logger.debug("Removed %d protocol temp files from %s", removed, directory)
    return removed
