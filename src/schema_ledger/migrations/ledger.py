"""Migration ledger: the persisted record of applied change-scripts.

One row per successfully applied script. Rows are only ever inserted; the
engine never updates or deletes them. The ``id`` column (insertion order) is
the authoritative history, which can differ from version order when an
operator backfills an older script by hand.
"""

from __future__ import annotations

import re

from schema_ledger.adapters.base import DatabaseAdapter
from schema_ledger.errors import ConfigError, DuplicateVersionError, IntegrityError
from schema_ledger.logging import get_logger

from .models import LedgerEntry

logger = get_logger(__name__)

DEFAULT_TABLE = "schema_migrations"

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?$")


def validate_table_name(table: str) -> str:
    """Accept ``table`` or ``schema.table`` made of plain identifiers."""
    if not _IDENTIFIER.match(table):
        raise ConfigError(f"Invalid ledger table name: {table!r}")
    return table


class MigrationLedger:
    """Reads and appends ledger rows through a :class:`DatabaseAdapter`.

    Example::

        ledger = MigrationLedger(adapter)
        ledger.ensure_schema()
        if "20240101000000_init" not in ledger.list_applied():
            ...
            ledger.record("20240101000000_init", "20240101000000 init", 12, checksum)
    """

    def __init__(self, adapter: DatabaseAdapter, table: str = DEFAULT_TABLE) -> None:
        self._adapter = adapter
        self._table = validate_table_name(table)

    @property
    def table(self) -> str:
        return self._table

    def ensure_schema(self) -> None:
        """Create the ledger table if it does not exist."""
        dialect = self._adapter.dialect
        self._adapter.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {self._table} (
                id {dialect.auto_increment()},
                version VARCHAR(255) NOT NULL UNIQUE,
                name VARCHAR(255) NOT NULL,
                executed_at TIMESTAMP {dialect.timestamp_default_now()},
                checksum VARCHAR(64),
                execution_time INTEGER
            )
            """
        )
        logger.debug("migration.ledger.ready", table=self._table)

    def list_applied(self) -> list[str]:
        """Versions already applied, in insertion order."""
        rows = self._adapter.query(f"SELECT version FROM {self._table} ORDER BY id")
        return [row["version"] for row in rows]

    def entries(self) -> list[LedgerEntry]:
        """Full ledger rows, in insertion order."""
        rows = self._adapter.query(
            f"SELECT id, version, name, executed_at, checksum, execution_time "
            f"FROM {self._table} ORDER BY id"
        )
        return [LedgerEntry.from_row(row) for row in rows]

    def record(self, version: str, name: str, execution_time_ms: int, checksum: str) -> None:
        """Append one ledger row.

        Raises:
            DuplicateVersionError: ``version`` is already recorded.
        """
        placeholders = self._adapter.dialect.placeholders(4)
        try:
            self._adapter.execute(
                f"INSERT INTO {self._table} (version, name, execution_time, checksum) "
                f"VALUES ({placeholders})",
                (version, name, execution_time_ms, checksum),
            )
        except IntegrityError as exc:
            raise DuplicateVersionError(version, cause=exc, name=name) from exc
        logger.debug("migration.ledger.recorded", version=version, execution_time_ms=execution_time_ms)


__all__ = ["DEFAULT_TABLE", "MigrationLedger", "validate_table_name"]
