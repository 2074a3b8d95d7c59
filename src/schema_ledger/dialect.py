"""SQL dialect abstraction for the ledger's own SQL.

The migration scripts themselves are raw, backend-specific SQL written by
operators. The only SQL the engine generates is the ledger DDL and its
INSERT/SELECT statements; ``Dialect`` supplies the few fragments that differ
between backends so the ledger code stays driver-agnostic.

Architecture::

    ┌──────────────┐        ┌──────────────────────────┐
    │ SQLite       │        │ PostgreSQL               │
    │ ?, ?, ?      │        │ %s, %s, %s               │
    │ INTEGER PK   │        │ SERIAL PRIMARY KEY       │
    │ AUTOINCREMENT│        │                          │
    └──────────────┘        └──────────────────────────┘

Examples:
    >>> from schema_ledger.dialect import get_dialect
    >>> d = get_dialect("sqlite")
    >>> d.placeholders(3)
    '?, ?, ?'
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Dialect(Protocol):
    """SQL dialect contract. Every method returns a SQL fragment."""

    @property
    def name(self) -> str:
        """Human-readable dialect name (e.g. ``'sqlite'``)."""
        ...

    def placeholders(self, count: int) -> str:
        """Comma-separated placeholder list."""
        ...

    def auto_increment(self) -> str:
        """DDL fragment for an auto-incrementing integer primary key."""
        ...

    def timestamp_default_now(self) -> str:
        """DDL ``DEFAULT`` clause for a timestamp column."""
        ...


class SQLiteDialect:
    """SQLite dialect."""

    @property
    def name(self) -> str:
        return "sqlite"

    def placeholders(self, count: int) -> str:
        return ", ".join("?" for _ in range(count))

    def auto_increment(self) -> str:
        return "INTEGER PRIMARY KEY AUTOINCREMENT"

    def timestamp_default_now(self) -> str:
        return "DEFAULT CURRENT_TIMESTAMP"


class PostgreSQLDialect:
    """PostgreSQL dialect (psycopg ``%s`` parameter style)."""

    @property
    def name(self) -> str:
        return "postgresql"

    def placeholders(self, count: int) -> str:
        return ", ".join("%s" for _ in range(count))

    def auto_increment(self) -> str:
        return "SERIAL PRIMARY KEY"

    def timestamp_default_now(self) -> str:
        return "DEFAULT CURRENT_TIMESTAMP"


# Dialects are stateless
_DIALECTS: dict[str, Dialect] = {
    "sqlite": SQLiteDialect(),
    "postgresql": PostgreSQLDialect(),
    "postgres": PostgreSQLDialect(),  # alias
}


def get_dialect(db_type: str) -> Dialect:
    """Get a dialect by database type name.

    Raises:
        ValueError: If ``db_type`` is not recognised.
    """
    key = db_type.lower()
    if key not in _DIALECTS:
        raise ValueError(
            f"Unknown dialect '{db_type}'. "
            f"Supported: {sorted(set(_DIALECTS) - {'postgres'})}"
        )
    return _DIALECTS[key]


__all__ = [
    "Dialect",
    "SQLiteDialect",
    "PostgreSQLDialect",
    "get_dialect",
]
