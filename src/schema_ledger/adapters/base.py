"""Database adapter base class.

Manifesto:
    The migration engine never talks to a driver directly. Adapters own the
    connection lifecycle, run statements, open explicit transactions, and
    translate driver exceptions into :mod:`schema_ledger.errors` types so the
    runner can tell a failed statement from a duplicate ledger row without
    importing ``sqlite3`` or ``psycopg``.

Features:
    - Abstract ``connect()``, ``disconnect()``, ``get_connection()``,
      ``transaction()`` and ``translate_error()``
    - ``execute()`` / ``query()`` with driver errors translated
    - Connections run in autocommit mode; ``transaction()`` is the only way
      to group statements
    - Context-manager protocol for connection lifecycle

Tags:
    database, abstract-base, adapter-pattern, schema-ledger
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from schema_ledger.dialect import Dialect, get_dialect
from schema_ledger.errors import DatabaseError

from .types import DatabaseConfig, DatabaseType


class DatabaseAdapter(ABC):
    """
    Abstract base class for database adapters.

    Provides common functionality and defines the interface
    that all adapters must implement.
    """

    def __init__(self, config: DatabaseConfig):
        self._config = config
        self._connected = False
        self._dialect: Dialect = get_dialect(config.db_type.value)

    @property
    def dialect(self) -> Dialect:
        """SQL dialect for this adapter's database type."""
        return self._dialect

    @property
    def db_type(self) -> DatabaseType:
        """Database type."""
        return self._config.db_type

    @property
    def is_connected(self) -> bool:
        """Whether adapter is connected."""
        return self._connected

    @abstractmethod
    def connect(self) -> None:
        """Establish connection to database."""
        ...

    @abstractmethod
    def disconnect(self) -> None:
        """Close connection to database. Safe to call when not connected."""
        ...

    @abstractmethod
    def get_connection(self) -> Any:
        """Get the live driver connection, connecting if needed."""
        ...

    @abstractmethod
    @contextmanager
    def transaction(self) -> Iterator[Any]:
        """Context manager for an explicit transaction."""
        ...

    @abstractmethod
    def translate_error(self, exc: Exception) -> DatabaseError | None:
        """Map a driver exception to a schema-ledger error, or None to re-raise as is."""
        ...

    def execute(self, sql: str, params: Sequence[Any] = ()) -> Any:
        """Execute one SQL statement."""
        conn = self.get_connection()
        try:
            return conn.execute(sql, params)
        except Exception as exc:
            translated = self.translate_error(exc)
            if translated is None:
                raise
            raise translated from exc

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        """Execute query and return results as dicts."""
        cursor = self.execute(sql, params)
        columns = [desc[0] for desc in cursor.description]
        return [dict(zip(columns, row, strict=False)) for row in cursor.fetchall()]

    def __enter__(self) -> DatabaseAdapter:
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.disconnect()


__all__ = [
    "DatabaseAdapter",
]
