# === FILE: icon_scout/logger.py ===
"""Project-wide logging configuration for **IconScout**.

* One importable instance :data:`logger`::

      from icon_scout.logger import logger
      logger.info("Resolving favicon")

* The CLI calls :func:`configure` once per invocation from ``--log-level`` /
  ``--log-file`` / ``--log-format``; ``resolve --debug`` only lowers the level
  via :func:`set_level`, so the configured handlers stay in place.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Union

DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME: Final[str] = "IconScout"

_LevelT = Union[int, str]


def configure(
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Replace the handlers of the project logger: stderr plus an optional rotating file."""
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)
    lg.handlers.clear()

    formatter = logging.Formatter(log_format)
    # stdout is reserved for command output (slug, JSON, paths)
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    lg.addHandler(console)

    if log_file is not None:
        file_handler = RotatingFileHandler(
            filename=str(log_file),
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        lg.addHandler(file_handler)

    lg.propagate = False
    return lg


def set_level(level: _LevelT) -> None:
    logging.getLogger(LOGGER_NAME).setLevel(level)


logger: logging.Logger = configure()

__all__ = ["logger", "configure", "set_level", "DEFAULT_FORMAT", "LOGGER_NAME"]
