"""Schema migrations: versioned change-scripts applied exactly once each.

Architecture::

    MigrationSource (source.py)      <migrations_dir>/<version>.sql, sorted by version
    MigrationLedger (ledger.py)      schema_migrations table, append-only
    MigrationRunner (runner.py)      diff source against ledger, apply pending in order
    create_migration (authoring.py)  timestamp-prefixed, templated new script

Example::

    from schema_ledger.adapters import SQLiteAdapter
    from schema_ledger.migrations import MigrationRunner, MigrationSource

    runner = MigrationRunner(SQLiteAdapter("app.db"), MigrationSource("migrations"))
    result = runner.migrate()
"""

from .authoring import create_migration, split_version
from .ledger import DEFAULT_TABLE, MigrationLedger
from .locks import LockFactory, advisory_lock, null_lock
from .models import (
    ChangeScript,
    ChecksumDrift,
    ChecksumMode,
    LedgerEntry,
    MigrationStatus,
    RunFailure,
    RunnerState,
    RunResult,
)
from .runner import MigrationRunner
from .source import MigrationSource
from .statements import split_statements

__all__ = [
    # Models
    "ChangeScript",
    "LedgerEntry",
    "ChecksumDrift",
    "ChecksumMode",
    "RunFailure",
    "RunResult",
    "RunnerState",
    "MigrationStatus",
    # Components
    "MigrationSource",
    "MigrationLedger",
    "MigrationRunner",
    "DEFAULT_TABLE",
    "split_statements",
    # Locks
    "LockFactory",
    "advisory_lock",
    "null_lock",
    # Authoring
    "create_migration",
    "split_version",
]
