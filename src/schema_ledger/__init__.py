"""
schema-ledger - ordered, append-only SQL schema migrations.

Brings a database schema to the desired state by applying versioned
change-scripts exactly once each, in version order, and recording every
success in a ledger table.

Quick start::

    from schema_ledger import MigrationRunner

    result = MigrationRunner.from_settings().migrate()
"""

__version__ = "0.1.0"

from schema_ledger.errors import MigrationError, SchemaLedgerError
from schema_ledger.migrations import (
    MigrationRunner,
    MigrationSource,
    MigrationStatus,
    RunResult,
)
from schema_ledger.settings import MigrateSettings, get_settings

__all__ = [
    "__version__",
    "MigrationRunner",
    "MigrationSource",
    "MigrationStatus",
    "RunResult",
    "MigrationError",
    "SchemaLedgerError",
    "MigrateSettings",
    "get_settings",
]
