"""
Shared pytest configuration and fixtures for tests.

Every test runs against its own task file under tmp_path, so nothing ever
touches the real ~/.taskman directory.
"""

import sys
import io
from pathlib import Path

import pytest

# Fix Windows console encoding
if sys.platform == "win32":
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8')
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8')

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from taskman.core import repository  # noqa: E402


@pytest.fixture(autouse=True)
def temp_data_path(tmp_path, monkeypatch):
    """Point the repository at tmp_path/data/tasks.json (the directory is not created)."""
    path = tmp_path / "data" / "tasks.json"
    monkeypatch.setattr(repository, "DATA_PATH", path)
    return path
