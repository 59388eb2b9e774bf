"""Logging utilities."""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path

LOG_DIR = Path(os.environ.get("XDG_STATE_HOME", "/tmp")) / "nm-openconnect-editor"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_logger(name: str, log_file: Path | None = None) -> logging.Logger:
    logger = logging.getLogger(f"nm_openconnect_editor.{name}")
    if logger.handlers:
        return logger
    if log_file is None:
        log_file = LOG_DIR / f"{name}.log"
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=10 * 1024 * 1024, backupCount=5
        )
    except OSError:
        # no writable log directory; records still propagate to the root logger
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger


def set_level(level: str | int) -> None:
    """Apply ``level`` to every logger of the package."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.getLogger("nm_openconnect_editor").setLevel(level)
