"""
Structured error types for schema-ledger.

Every failure the migration engine can surface is a typed subclass of
:class:`SchemaLedgerError`. Errors carry a category for routing, a structured
context (which script, which statement, which file) and the chained driver
exception so operators can see the root cause without digging through logs.

Manifesto:
    - **Typed Error Hierarchy:** One class per failure mode of a run
    - **Nothing Retried:** A failed run needs operator correction; no error
      advertises itself as retryable
    - **Rich Context:** Errors carry version/name/statement for reporting
    - **Error Chaining:** The driver exception is always kept as ``cause``

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                     SchemaLedgerError                         │
        │               (category, context, cause)                      │
        ├──────────────────────────────────────────────────────────────┤
        │                                                               │
        │  ConfigError           DatabaseError        MigrationError    │
        │  (CONFIG)              (DATABASE)           (MIGRATION)       │
        │       │                     │                    │            │
        │  InvalidMigration-     QueryError           Initialization    │
        │  NameError             IntegrityError       SourceRead        │
        │                        DatabaseConnection   MigrationExecution│
        │                                             DuplicateVersion  │
        │                                             ChecksumMismatch  │
        └──────────────────────────────────────────────────────────────┘

Examples:
    Wrapping a driver failure:

    >>> try:
    ...     raise RuntimeError("syntax error near FOO")
    ... except RuntimeError as e:
    ...     error = MigrationExecutionError("20240101000000_a", "20240101000000 a", e)
    >>> error.version
    '20240101000000_a'
    >>> error.to_dict()["category"]
    'MIGRATION'

Tags:
    error-handling, exception-hierarchy, migrations, schema-ledger
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from schema_ledger.migrations.models import ChecksumDrift, RunResult


class ErrorCategory(str, Enum):
    """Standard error categories for classification and reporting."""

    # Infrastructure
    DATABASE = "DATABASE"         # Connection, query, constraint
    SOURCE = "SOURCE"             # Migration files on disk

    # Configuration
    CONFIG = "CONFIG"             # Missing or invalid settings
    VALIDATION = "VALIDATION"     # Bad operator input

    # Engine
    MIGRATION = "MIGRATION"       # Run aborted by the engine

    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only fields that are set end up in :meth:`to_dict`, so the same context
    type serves connection errors (no version) and execution errors (version,
    name, statement index) alike.
    """

    version: str | None = None
    name: str | None = None
    statement_index: int | None = None
    path: str | None = None
    table: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        result = {
            k: v
            for k, v in {
                "version": self.version,
                "name": self.name,
                "statement_index": self.statement_index,
                "path": self.path,
                "table": self.table,
            }.items()
            if v is not None
        }
        if self.metadata:
            result.update(self.metadata)
        return result


class SchemaLedgerError(Exception):
    """
    Base exception for all schema-ledger errors.

    Subclasses set ``default_category``; callers may override it per
    instance. ``cause`` is chained as ``__cause__`` so tracebacks show the
    driver error that started it all.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> SchemaLedgerError:
        """
        Add context to this error (fluent API).

        Usage:
            raise QueryError("Failed").with_context(table="schema_migrations")
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(SchemaLedgerError):
    """
    Configuration error.

    Raised for unsupported database URLs, unknown adapters and missing
    drivers. Configuration must be fixed before anything can run.
    """

    default_category = ErrorCategory.CONFIG


class InvalidMigrationNameError(SchemaLedgerError):
    """A new migration was requested with an empty or blank name."""

    default_category = ErrorCategory.VALIDATION

    def __init__(self, name: str | None, message: str | None = None):
        self.requested_name = name
        super().__init__(message or "Please provide a migration name")


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(SchemaLedgerError):
    """Database query or transaction error."""

    default_category = ErrorCategory.DATABASE


class QueryError(DatabaseError):
    """A SQL statement was rejected by the database."""

    pass


class IntegrityError(DatabaseError):
    """Database integrity constraint violation."""

    pass


class DatabaseConnectionError(DatabaseError):
    """Could not open (or lost) the database connection."""

    pass


# =============================================================================
# MIGRATION ERRORS
# =============================================================================


class MigrationError(SchemaLedgerError):
    """
    A migration run was aborted.

    The runner attaches the partially filled run summary as ``result`` before
    re-raising, so callers can report how far the run got.
    """

    default_category = ErrorCategory.MIGRATION

    def __init__(self, message: str, *, result: RunResult | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.result = result

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.result is not None:
            result["run"] = self.result.to_dict()
        return result


class InitializationError(MigrationError):
    """Database unreachable or ledger table could not be ensured."""

    pass


class SourceReadError(MigrationError):
    """A listed migration file could not be read at apply time."""

    default_category = ErrorCategory.SOURCE

    def __init__(self, path: str, cause: BaseException | None = None):
        self.path = path
        super().__init__(
            f"Migration file could not be read: {path}",
            context=ErrorContext(path=path),
            cause=cause,
        )


class MigrationExecutionError(MigrationError):
    """A statement of a change-script failed."""

    def __init__(
        self,
        version: str,
        name: str,
        cause: BaseException,
        *,
        statement_index: int | None = None,
    ):
        self.version = version
        self.name = name
        self.statement_index = statement_index
        super().__init__(
            f"Migration {version} ({name}) failed: {cause}",
            context=ErrorContext(version=version, name=name, statement_index=statement_index),
            cause=cause,
        )


class DuplicateVersionError(MigrationError):
    """
    The ledger already holds this version.

    The runner filters applied versions before recording, so this only fires
    when another run recorded the same version concurrently, or the ledger was
    edited by hand.
    """

    def __init__(self, version: str, cause: BaseException | None = None, *, name: str | None = None):
        self.version = version
        super().__init__(
            f"Migration {version} is already recorded in the ledger",
            context=ErrorContext(version=version, name=name),
            cause=cause,
        )


class ChecksumMismatchError(MigrationError):
    """Applied migration files were modified after they were applied."""

    def __init__(self, drifts: list[ChecksumDrift]):
        self.drifts = list(drifts)
        versions = ", ".join(d.version for d in self.drifts)
        super().__init__(
            f"Checksum mismatch for applied migration(s): {versions}",
            context=ErrorContext(metadata={"versions": [d.version for d in self.drifts]}),
        )


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "SchemaLedgerError",
    # Config
    "ConfigError",
    "InvalidMigrationNameError",
    # Database
    "DatabaseError",
    "QueryError",
    "IntegrityError",
    "DatabaseConnectionError",
    # Migration
    "MigrationError",
    "InitializationError",
    "SourceReadError",
    "MigrationExecutionError",
    "DuplicateVersionError",
    "ChecksumMismatchError",
]
