"""Logging for the now playing panel.

The panel owns stdout while it draws frames, so log records go to a rotating
file next to the config and only errors reach stderr. Handlers are attached
to the ``now_playing`` package logger, which leaves a host application's root
logging alone.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
import os
from pathlib import Path
from typing import Optional

from now_playing.config import get_config_dir

PACKAGE_LOGGER = "now_playing"
LOG_LEVEL_ENV = "NOW_PLAYING_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s"


def default_log_path() -> Path:
    return get_config_dir() / "logs" / "now_playing.log"


def level_from_env(default: int = logging.INFO) -> int:
    """Return the level named by ``NOW_PLAYING_LOG_LEVEL``, or ``default``."""
    name = os.getenv(LOG_LEVEL_ENV, "").strip().upper()
    if not name:
        return default
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else default


def init_logging(
    log_path: Optional[Path] = None, *, console_level: int = logging.ERROR
) -> Optional[Path]:
    """Install the file and stderr handlers on the package logger.

    Calling it again replaces the handlers from the previous call. Returns
    the log file path, or None when the file could not be opened and only
    stderr logging is active.
    """
    level = level_from_env()
    formatter = logging.Formatter(LOG_FORMAT)
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(max(level, console_level))
    console.setFormatter(formatter)
    logger.addHandler(console)

    try:
        path = log_path if log_path is not None else default_log_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path, maxBytes=2_000_000, backupCount=5, encoding="utf-8"
        )
    except OSError as exc:
        logger.error("File logging disabled: %s", exc)
        return None
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)
    logger.info("Logging initialized at %s", path)
    return path
