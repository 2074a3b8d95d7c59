"""SQLite database adapter."""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from schema_ledger.errors import DatabaseConnectionError, DatabaseError, IntegrityError, QueryError

from .base import DatabaseAdapter
from .types import DatabaseConfig, DatabaseType


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter.

    Uses the built-in sqlite3 module with ``isolation_level=None`` so that
    the driver never opens implicit transactions: every statement
    autocommits unless it runs inside :meth:`transaction`, which issues an
    explicit ``BEGIN``/``COMMIT``. SQLite DDL is transactional, so a rolled
    back script leaves no tables behind.
    """

    def __init__(
        self,
        path: str = ":memory:",
        *,
        timeout: float = 5.0,
        **kwargs: Any,
    ):
        config = DatabaseConfig(
            db_type=DatabaseType.SQLITE,
            path=path,
            options=kwargs,
        )
        super().__init__(config)
        self._timeout = timeout
        self._conn: sqlite3.Connection | None = None

    @property
    def path(self) -> str:
        return self._config.path or ":memory:"

    def connect(self) -> None:
        """Connect to SQLite database, creating the parent directory of a file database."""
        if self._conn is not None:
            return

        path = self.path
        uri = path.startswith("file:") or "?" in path

        try:
            if not uri and path != ":memory:":
                Path(path).parent.mkdir(parents=True, exist_ok=True)

            self._conn = sqlite3.connect(
                path,
                timeout=self._timeout,
                isolation_level=None,
                check_same_thread=False,
                uri=uri,
            )
            self._conn.row_factory = sqlite3.Row

            # Enable foreign keys
            self._conn.execute("PRAGMA foreign_keys = ON")

            self._connected = True

        except (sqlite3.Error, OSError) as e:
            self._conn = None
            raise DatabaseConnectionError(
                f"Failed to connect to SQLite: {e}",
                cause=e,
            ) from e

    def disconnect(self) -> None:
        """Close SQLite connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
            self._connected = False

    def get_connection(self) -> sqlite3.Connection:
        """Get the SQLite connection."""
        if not self._conn:
            self.connect()
        return self._conn  # type: ignore[return-value]

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Explicit ``BEGIN``/``COMMIT`` block; rolls back on any exception."""
        conn = self.get_connection()
        self.execute("BEGIN")
        try:
            yield conn
        except BaseException:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise
        self.execute("COMMIT")

    def translate_error(self, exc: Exception) -> DatabaseError | None:
        if isinstance(exc, sqlite3.IntegrityError):
            return IntegrityError(str(exc), cause=exc)
        if isinstance(exc, (sqlite3.Error, sqlite3.Warning)):
            return QueryError(str(exc), cause=exc)
        return None

    def query(self, sql: str, params: Any = ()) -> list[dict[str, Any]]:
        """Execute query and return results as dicts."""
        cursor = self.execute(sql, params)
        return [dict(row) for row in cursor.fetchall()]


__all__ = [
    "SQLiteAdapter",
]
