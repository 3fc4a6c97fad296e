"""Logging configuration for the API server and command line runs.

Installs a console handler plus two rotating files under ``log_dir``:
``combined.log`` receives every record and ``error.log`` only errors.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

__all__ = ["configure_logging", "LOG_FORMAT"]

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_MAX_BYTES = 10 * 1024 * 1024
_BACKUP_COUNT = 5


def configure_logging(level: str | int = "INFO", log_dir: str | Path | None = "logs") -> None:
    """Configure the root logger.

    Parameters
    ----------
    level:
        Logging level as a string (e.g. ``"INFO"``) or numeric value.
    log_dir:
        Directory receiving ``combined.log`` and ``error.log``. ``None``
        disables file output.
    """

    if isinstance(level, str):
        level = level.upper()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)
    root_logger.addHandler(stdout_handler)

    if log_dir is None:
        return

    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)

    combined_handler = RotatingFileHandler(
        directory / "combined.log", maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT, encoding="utf-8"
    )
    combined_handler.setFormatter(formatter)
    root_logger.addHandler(combined_handler)

    error_handler = RotatingFileHandler(
        directory / "error.log", maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT, encoding="utf-8"
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(formatter)
    root_logger.addHandler(error_handler)
