"""
FILE: taskman/logging_setup.py
PURPOSE: One-time logging configuration for the CLI and REPL
EXPORTS:
  - setup_logging(level, log_dir) -> None
DEPENDENCIES:
  - logging, logging.handlers, sys, pathlib (stdlib)
  - taskman.config (SETTINGS)
NOTES:
  - File handler gets everything (DEBUG), rotated at 1 MB with 3 backups
  - Console handler writes to stderr at the configured level (WARNING by
    default) so normal output on stdout stays clean for --json/--raw
  - Safe to call twice: existing handlers on the taskman logger are replaced
  - A log directory that cannot be created only disables the file handler
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from .config import SETTINGS

LOG_FILE_NAME = "taskman.log"


def setup_logging(
    level: Optional[str] = None,
    log_dir: Optional[Union[str, Path]] = None,
) -> None:
    """
    Configure the "taskman" logger.

    Args:
        level: Console level name (defaults to SETTINGS.log_level)
        log_dir: Directory of the rotating log file (defaults to SETTINGS.log_dir)
    """
    level = (level or SETTINGS.log_level).upper()
    log_dir = Path(log_dir) if log_dir else SETTINGS.log_dir

    logger = logging.getLogger("taskman")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(getattr(logging, level, logging.WARNING))
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_dir / LOG_FILE_NAME,
            maxBytes=1_000_000,
            backupCount=3,
            encoding="utf-8",
        )
    except OSError as e:
        logger.warning("File logging disabled, cannot open %s: %s", log_dir, e)
        return

    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)
