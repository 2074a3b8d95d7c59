"""Database adapters -- the query-execution collaborator of the migration engine.

Manifesto:
    Migration scripts run identically against SQLite (development, tests,
    single-process deployments) and PostgreSQL (production). Adapters hide
    driver differences: connection lifecycle, explicit transactions,
    parameter style and exception types.

    The PostgreSQL driver is **import-guarded**: it is only required at
    ``connect()`` time. Install the extra::

        pip install schema-ledger[postgres]   # psycopg

Architecture::

    DatabaseAdapter (base.py)        Abstract base with connect/execute/query/transaction
        |-- SQLiteAdapter            stdlib sqlite3 (always available)
        |-- PostgreSQLAdapter        psycopg 3 (optional)

    AdapterRegistry (registry.py)    name -> adapter class, adapter_from_url()
    DatabaseConfig (types.py)        Connection parameters
    DatabaseType (types.py)          Enum of supported backends

Tags:
    database, adapters, sqlite, postgresql, schema-ledger
"""

from schema_ledger.dialect import Dialect, get_dialect

from .base import DatabaseAdapter
from .postgresql import PostgreSQLAdapter
from .registry import AdapterRegistry, adapter_from_url, adapter_registry, get_adapter
from .sqlite import SQLiteAdapter
from .types import DatabaseConfig, DatabaseType

__all__ = [
    # Types
    "DatabaseType",
    "DatabaseConfig",
    "Dialect",
    "get_dialect",
    # Base class
    "DatabaseAdapter",
    # Implementations
    "SQLiteAdapter",
    "PostgreSQLAdapter",
    # Registry
    "AdapterRegistry",
    "adapter_registry",
    "get_adapter",
    "adapter_from_url",
]
