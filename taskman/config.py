"""
FILE: taskman/config.py
PURPOSE: Runtime settings read from the environment (and an optional .env file)
EXPORTS:
  - Settings (frozen dataclass)
  - load_settings() -> Settings
  - SETTINGS (settings resolved at import time)
DEPENDENCIES:
  - python-dotenv (load .env files)
  - os, pathlib, dataclasses (stdlib)
NOTES:
  - Recognized variables:
      TASKMAN_FILE       JSON task file (default ~/.taskman/tasks.json)
      TASKMAN_LOG_LEVEL  console log level (default WARNING)
      TASKMAN_LOG_DIR    rotating log file directory (default ~/.taskman/logs)
  - A .env in the current directory is loaded first; real environment
    variables always win over it
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


DATA_DIR = Path.home() / ".taskman"


@dataclass(frozen=True)
class Settings:
    data_file: Path
    log_level: str = "WARNING"
    log_dir: Path = DATA_DIR / "logs"


def load_settings() -> Settings:
    """
    Build Settings from the environment.

    Returns:
        Settings with every unset variable at its default
    """
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    data_file = os.getenv("TASKMAN_FILE", "").strip()
    log_dir = os.getenv("TASKMAN_LOG_DIR", "").strip()

    return Settings(
        data_file=Path(data_file).expanduser() if data_file else DATA_DIR / "tasks.json",
        log_level=os.getenv("TASKMAN_LOG_LEVEL", "WARNING").strip().upper() or "WARNING",
        log_dir=Path(log_dir).expanduser() if log_dir else DATA_DIR / "logs",
    )


SETTINGS = load_settings()
