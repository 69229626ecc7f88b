"""
FILE: taskman/core/repository.py
PURPOSE: Load and save the task store as a JSON file
EXPORTS:
  - DATA_PATH (task file location)
  - load_store() -> TaskStore
  - save_store(store) -> None
DEPENDENCIES:
  - json, os, tempfile, pathlib, logging (stdlib)
  - taskman.config (SETTINGS)
  - taskman.core.store (TaskStore)
  - taskman.core.exceptions (StoreLoadError, StoreSaveError)
NOTES:
  - File stored at ~/.taskman/tasks.json unless TASKMAN_FILE says otherwise
  - A missing file means a fresh store with just the root
  - Writes go to a temp file in the same directory, then os.replace() it over
    the target, so a crash never leaves a half-written file behind
  - The directory is created on first save
  - Returns domain objects (TaskStore), never raw dicts
"""

import json
import logging
import os
import tempfile
from pathlib import Path

from ..config import SETTINGS
from .exceptions import StoreLoadError, StoreSaveError
from .store import TaskStore

logger = logging.getLogger(__name__)


# Task file location (tests point this at a temp directory)
DATA_PATH: Path = SETTINGS.data_file


def load_store() -> TaskStore:
    """
    Load the task store from DATA_PATH.

    Returns:
        The stored tree, or an empty store if the file doesn't exist yet

    Raises:
        StoreLoadError: If the file can't be read or isn't valid task JSON
        InvariantViolationError: If the stored tree is inconsistent
    """
    path = Path(DATA_PATH)
    if not path.exists():
        logger.info("No task file at %s, starting with an empty tree", path)
        return TaskStore()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error("Failed to read task file %s: %s", path, e)
        raise StoreLoadError(f"Cannot read task file {path}: {e}")

    store = TaskStore.from_dict(data)
    logger.info("Loaded %d tasks from %s", len(store), path)
    return store


def save_store(store: TaskStore) -> None:
    """
    Write the task store to DATA_PATH atomically.

    Raises:
        StoreSaveError: If the directory or file can't be written

    Note:
        The in-memory store is left as is when saving fails.
    """
    path = Path(DATA_PATH)
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as f:
            tmp_name = f.name
            json.dump(store.to_dict(), f, indent=2)
        os.replace(tmp_name, path)
    except OSError as e:
        logger.error("Failed to save task file %s: %s", path, e)
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise StoreSaveError(f"Cannot write task file {path}: {e}")

    logger.info("Saved %d tasks to %s", len(store), path)
