"""Shared fixtures."""

import shutil
import tempfile
from pathlib import Path

import pytest

from quizwheel.storage.db import get_connection, init_schema


@pytest.fixture
def temp_db():
    tmp = tempfile.mkdtemp()
    path = Path(tmp) / "test.duckdb"
    conn = get_connection(path)
    init_schema(conn)
    yield conn
    conn.close()
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def db_path(tmp_path):
    """Location for a DuckDB file, for components that open their own connections."""
    return tmp_path / "game.duckdb"
