"""
Root-level shared fixtures for CoreTable tests.

Module-specific fixtures live in the conftest.py of each test package.
"""

import os
import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest

# Keep JSON log files out of the working tree
os.environ.setdefault("CORETABLE_LOG_DIR", tempfile.mkdtemp(prefix="coretable_logs_"))

from coretable.config import GridOptions  # noqa: E402
from coretable.models import ColumnDefinition  # noqa: E402

from tests.helpers import DATA_URL, FakeTransport  # noqa: E402


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory, removed after the test."""
    temp_path = Path(tempfile.mkdtemp(prefix="coretable_test_"))
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def columns() -> list[ColumnDefinition]:
    """Three columns; the last one is not sortable."""
    return [
        ColumnDefinition(key="id", title="ID"),
        ColumnDefinition(key="name", title="Name"),
        ColumnDefinition(key="email", title="Email", sortable=False),
    ]


@pytest.fixture
def options(columns) -> GridOptions:
    return GridOptions(url=DATA_URL, columns=columns, page_size=10, search_delay_ms=20)


@pytest.fixture
def fake_transport() -> FakeTransport:
    """Transport whose requests wait to be resolved by the test."""
    return FakeTransport()
