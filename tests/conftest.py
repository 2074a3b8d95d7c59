"""
Shared pytest fixtures for schema-ledger tests.

This module provides:
- Isolation from the caller's environment (settings cache, SCHEMA_LEDGER_* vars, cwd)
- A migrations directory and a file-backed SQLite adapter under ``tmp_path``
- ``write_script`` for dropping change-scripts into the migrations directory
"""

from __future__ import annotations

import os
import sqlite3
import textwrap
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from schema_ledger.adapters import SQLiteAdapter
from schema_ledger.logging import clear_context
from schema_ledger.migrations import MigrationRunner, MigrationSource
from schema_ledger.settings import clear_settings_cache


# =============================================================================
# Isolation
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Run every test in its own cwd with no SCHEMA_LEDGER_* variables set."""
    for key in list(os.environ):
        if key.startswith("SCHEMA_LEDGER_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
    clear_context()
    yield
    clear_settings_cache()
    clear_context()


# =============================================================================
# Migration fixtures
# =============================================================================


@pytest.fixture()
def migrations_dir(tmp_path: Path) -> Path:
    d = tmp_path / "migrations"
    d.mkdir()
    return d


@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "app.db"


@pytest.fixture()
def adapter(db_path: Path) -> Iterator[SQLiteAdapter]:
    """File-backed SQLite adapter; survives the runner's disconnect between runs."""
    a = SQLiteAdapter(str(db_path))
    yield a
    a.disconnect()


@pytest.fixture()
def write_script(migrations_dir: Path) -> Callable[[str, str], Path]:
    """Write ``<version>.sql`` with dedented content and return its path."""

    def _write(version: str, sql: str) -> Path:
        path = migrations_dir / f"{version}.sql"
        path.write_text(textwrap.dedent(sql), encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def runner(adapter: SQLiteAdapter, migrations_dir: Path) -> MigrationRunner:
    return MigrationRunner(adapter, MigrationSource(migrations_dir))


def table_names(db_path: Path) -> set[str]:
    """Tables present in a SQLite file, read with a fresh connection."""
    conn = sqlite3.connect(db_path)
    try:
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'").fetchall()
    finally:
        conn.close()
    return {row[0] for row in rows}


@pytest.fixture()
def tables(db_path: Path) -> Callable[[], set[str]]:
    """Callable returning the current table names of the test database."""
    return lambda: table_names(db_path)
