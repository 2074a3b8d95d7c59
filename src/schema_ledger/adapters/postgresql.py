"""PostgreSQL database adapter (psycopg 3)."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from schema_ledger.errors import (
    ConfigError,
    DatabaseConnectionError,
    DatabaseError,
    IntegrityError,
    QueryError,
)

from .base import DatabaseAdapter
from .types import DatabaseConfig, DatabaseType


class PostgreSQLAdapter(DatabaseAdapter):
    """
    PostgreSQL database adapter.

    Holds a single psycopg connection in autocommit mode for the duration of
    a run; :meth:`transaction` opens an explicit transaction block through
    ``Connection.transaction()``. PostgreSQL DDL is transactional.

    The driver is imported at ``connect()`` time so SQLite-only installs do
    not need it.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 5432,
        database: str = "",
        username: str | None = None,
        password: str | None = None,
        *,
        dsn: str | None = None,
        connect_timeout: int = 10,
        **kwargs: Any,
    ):
        config = DatabaseConfig(
            db_type=DatabaseType.POSTGRESQL,
            dsn=dsn,
            host=host,
            port=port,
            database=database,
            username=username,
            password=password,
            connect_timeout=connect_timeout,
            options=kwargs,
        )
        super().__init__(config)
        self._conn: Any = None

    def connect(self) -> None:
        """Connect to PostgreSQL database."""
        if self._conn is not None:
            return

        try:
            import psycopg
            from psycopg.rows import dict_row
        except ImportError:
            raise ConfigError(
                "psycopg is required for PostgreSQL. Install with: pip install schema-ledger[postgres]"
            ) from None

        try:
            self._conn = psycopg.connect(
                self._config.to_connection_string(),
                autocommit=True,
                row_factory=dict_row,
                connect_timeout=self._config.connect_timeout,
                **self._config.options,
            )
            self._connected = True
        except psycopg.Error as e:
            self._conn = None
            raise DatabaseConnectionError(
                f"Failed to connect to PostgreSQL: {e}",
                cause=e,
            ) from e

    def disconnect(self) -> None:
        """Close the PostgreSQL connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            self._connected = False

    def get_connection(self) -> Any:
        """Get the live connection."""
        if self._conn is None:
            self.connect()
        return self._conn

    @contextmanager
    def transaction(self) -> Iterator[Any]:
        """Transaction block; psycopg rolls back when the body raises."""
        conn = self.get_connection()
        with conn.transaction():
            yield conn

    def translate_error(self, exc: Exception) -> DatabaseError | None:
        import psycopg

        if isinstance(exc, psycopg.IntegrityError):
            return IntegrityError(str(exc), cause=exc)
        if isinstance(exc, psycopg.OperationalError) and self._conn is not None and self._conn.closed:
            return DatabaseConnectionError(str(exc), cause=exc)
        if isinstance(exc, psycopg.Error):
            return QueryError(str(exc), cause=exc)
        return None

    def execute(self, sql: str, params: Sequence[Any] = ()) -> Any:
        # psycopg only interpolates when params is not None; raw migration
        # SQL may contain literal '%' characters.
        return super().execute(sql, tuple(params) if params else None)  # type: ignore[arg-type]

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        """Execute query; rows are already dicts via ``dict_row``."""
        cursor = self.execute(sql, params)
        return list(cursor.fetchall())


__all__ = [
    "PostgreSQLAdapter",
]
