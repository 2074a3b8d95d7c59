"""Migration runner: diff the source against the ledger and apply what is pending.

States of a run::

    IDLE -> INITIALIZING -> DIFFING -> APPLYING -> COMPLETED
                 |             |          |
                 +-------------+----------+-----> FAILED

A run applies pending change-scripts strictly in version order and stops at
the first failure. Scripts applied earlier in the same run stay applied;
later ones are not attempted. Nothing is retried. Fix the script (or the
database) and run again.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from schema_ledger.adapters.base import DatabaseAdapter
from schema_ledger.adapters.registry import adapter_from_url
from schema_ledger.errors import (
    ChecksumMismatchError,
    DatabaseError,
    ErrorContext,
    InitializationError,
    MigrationError,
    MigrationExecutionError,
    SchemaLedgerError,
    SourceReadError,
)
from schema_ledger.hashing import compute_checksum
from schema_ledger.logging import bind_context, get_logger, unbind_context
from schema_ledger.timing import timed_block

from . import authoring
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
from .source import MigrationSource
from .statements import DEFAULT_TERMINATOR, split_statements

if TYPE_CHECKING:
    from schema_ledger.settings import MigrateSettings

logger = get_logger(__name__)


class MigrationRunner:
    """Applies pending change-scripts and records them in the ledger.

    Parameters
    ----------
    adapter
        Database adapter. The runner connects on each run and disconnects
        when the run ends, whatever the outcome.
    source
        Where change-scripts come from.
    ledger_table
        Name of the ledger table.
    terminator
        Statement terminator used to split scripts.
    checksum_mode
        ``off`` skips drift detection, ``warn`` logs and reports drifted
        versions, ``error`` aborts the run before anything is applied.
    transactional
        Run each script's statements and its ledger row in one transaction.
    lock
        Factory for the run-level lock held from diffing to the end of the
        run. Defaults to no lock.

    ``migrate``, ``status`` and ``verify`` share one adapter connection, so
    calls on the same runner from several threads are serialized.

    Example::

        runner = MigrationRunner.from_settings()
        result = runner.migrate()
        print(f"Applied {result.applied_count} of {result.pending_count} pending")
    """

    def __init__(
        self,
        adapter: DatabaseAdapter,
        source: MigrationSource,
        *,
        ledger_table: str = DEFAULT_TABLE,
        terminator: str = DEFAULT_TERMINATOR,
        checksum_mode: ChecksumMode | str = ChecksumMode.WARN,
        transactional: bool = True,
        lock: LockFactory | None = None,
    ) -> None:
        if not terminator:
            raise ValueError("statement terminator must not be empty")
        self._adapter = adapter
        self._source = source
        self._ledger = MigrationLedger(adapter, ledger_table)
        self._terminator = terminator
        self._checksum_mode = ChecksumMode(checksum_mode)
        self._transactional = transactional
        self._lock: LockFactory = lock or null_lock
        self._state = RunnerState.IDLE
        self._last_result: RunResult | None = None
        self._run_lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: MigrateSettings | None = None) -> MigrationRunner:
        """Build a runner (adapter, source, lock) from configuration."""
        from schema_ledger.settings import get_settings

        settings = settings or get_settings()
        adapter = adapter_from_url(settings.database_url, connect_timeout=settings.connect_timeout)
        source = MigrationSource(settings.migrations_dir, suffix=settings.script_suffix)
        return cls(
            adapter,
            source,
            ledger_table=settings.ledger_table,
            terminator=settings.statement_terminator,
            checksum_mode=settings.checksum_mode,
            transactional=settings.transactional,
            lock=advisory_lock(settings.ledger_table) if settings.advisory_lock else None,
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def adapter(self) -> DatabaseAdapter:
        return self._adapter

    @property
    def source(self) -> MigrationSource:
        return self._source

    @property
    def ledger(self) -> MigrationLedger:
        return self._ledger

    @property
    def state(self) -> RunnerState:
        return self._state

    @property
    def last_result(self) -> RunResult | None:
        """Summary of the most recent ``migrate()`` call, successful or not."""
        return self._last_result

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """Connect and make sure the ledger table exists.

        Raises:
            InitializationError: the database is unreachable or the ledger
                table cannot be created.
        """
        self._state = RunnerState.INITIALIZING
        try:
            self._open()
        except SchemaLedgerError:
            self._state = RunnerState.FAILED
            raise

    def migrate(self) -> RunResult:
        """Apply every pending change-script, in version order.

        Safe to call repeatedly: a second call with no new scripts applies
        nothing. On failure the partial :class:`RunResult` is attached to
        the raised :class:`MigrationError` as ``result`` and kept as
        :attr:`last_result`.
        """
        with self._run_lock:
            return self._migrate()

    def _migrate(self) -> RunResult:
        result = RunResult()
        self._last_result = result
        bind_context(run_id=uuid4().hex[:12])
        logger.info("migration.run.started", directory=str(self._source.directory))
        try:
            with timed_block("migrate") as run_timer:
                try:
                    self.initialize()
                    with self._lock(self._adapter):
                        self._run(result)
                except Exception as exc:
                    self._fail(result, exc)
                    raise
                finally:
                    run_timer.stop()
                    result.duration_ms = round(run_timer.duration_ms, 2)
        finally:
            self._adapter.disconnect()
            unbind_context("run_id")

        self._state = RunnerState.COMPLETED
        logger.info(
            "migration.run.completed",
            discovered=result.discovered,
            already_applied=result.already_applied,
            applied=result.applied_count,
            drifted=len(result.drifted),
            duration_ms=result.duration_ms,
        )
        return result

    def status(self) -> MigrationStatus:
        """Applied, pending and drifted scripts, without applying anything."""
        with self._run_lock:
            try:
                self._open()
                entries = self._ledger.entries()
                available = self._source.list_available()
                applied = {entry.version for entry in entries}
                return MigrationStatus(
                    applied=entries,
                    pending=[script for script in available if script.version not in applied],
                    drifted=self._find_drift(available, entries),
                )
            finally:
                self._adapter.disconnect()

    def verify(self) -> list[ChecksumDrift]:
        """Compare recorded checksums with the scripts on disk. Never raises on drift."""
        with self._run_lock:
            try:
                self._open()
                return self._find_drift(self._source.list_available(), self._ledger.entries())
            finally:
                self._adapter.disconnect()

    def create_migration(self, name: str) -> str:
        """Author a new templated change-script; returns its file name."""
        path = authoring.create_migration(self._source.directory, name, suffix=self._source.suffix)
        return path.name

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _open(self) -> None:
        try:
            self._adapter.connect()
            self._ledger.ensure_schema()
        except DatabaseError as exc:
            self._adapter.disconnect()
            raise InitializationError(
                f"Could not initialize migration ledger: {exc}",
                context=ErrorContext(table=self._ledger.table),
                cause=exc,
            ) from exc

    def _run(self, result: RunResult) -> None:
        self._state = RunnerState.DIFFING
        applied = set(self._ledger.list_applied())
        available = self._source.list_available()
        pending = [script for script in available if script.version not in applied]

        result.discovered = len(available)
        result.already_applied = len(available) - len(pending)
        for script in available:
            if script.version in applied:
                logger.debug("migration.skipped", version=script.version)

        if self._checksum_mode is not ChecksumMode.OFF:
            self._check_drift(available, result)

        self._state = RunnerState.APPLYING
        for script in pending:
            try:
                self._apply(script)
            except SourceReadError as exc:
                exc.with_context(version=script.version, name=script.name)
                raise
            result.applied.append(script.version)

    def _check_drift(self, available: list[ChangeScript], result: RunResult) -> None:
        drifts = self._find_drift(available, self._ledger.entries())
        result.drifted = [drift.version for drift in drifts]
        for drift in drifts:
            logger.warning(
                "migration.checksum_drift",
                version=drift.version,
                recorded=drift.recorded,
                current=drift.current,
            )
        if drifts and self._checksum_mode is ChecksumMode.ERROR:
            raise ChecksumMismatchError(drifts)

    def _find_drift(
        self, available: list[ChangeScript], entries: list[LedgerEntry]
    ) -> list[ChecksumDrift]:
        scripts = {script.version: script for script in available}
        drifts: list[ChecksumDrift] = []
        for entry in entries:
            script = scripts.get(entry.version)
            if script is None or not entry.checksum:
                continue
            current = compute_checksum(self._source.load(script))
            if current != entry.checksum:
                drifts.append(ChecksumDrift(entry.version, entry.checksum, current))
        return drifts

    def _apply(self, script: ChangeScript) -> None:
        content = self._source.load(script)
        statements = split_statements(content, self._terminator)
        checksum = compute_checksum(content)

        try:
            with timed_block(script.version) as timer:
                try:
                    with self._script_scope():
                        for index, statement in enumerate(statements, start=1):
                            try:
                                self._adapter.execute(statement)
                            except DatabaseError as exc:
                                raise MigrationExecutionError(
                                    script.version, script.name, exc, statement_index=index
                                ) from exc
                        timer.stop()
                        self._ledger.record(script.version, script.name, timer.elapsed_ms, checksum)
                except DatabaseError as exc:
                    # COMMIT or ledger insert failed
                    raise MigrationExecutionError(script.version, script.name, exc) from exc
        except SchemaLedgerError:
            logger.error(
                "migration.failed",
                version=script.version,
                error_type=timer.error_info["error_type"],
                error=timer.error_info["error_message"],
                duration_ms=round(timer.duration_ms, 2),
            )
            raise

        timer.add_metric("statements", len(statements))
        logger.info("migration.applied", version=script.version, **timer.to_log_dict())

    @contextmanager
    def _script_scope(self) -> Iterator[Any]:
        if self._transactional:
            with self._adapter.transaction() as conn:
                yield conn
        else:
            yield self._adapter.get_connection()

    def _fail(self, result: RunResult, exc: BaseException) -> None:
        self._state = RunnerState.FAILED
        if result.failure is None:
            if isinstance(exc, SchemaLedgerError):
                result.failure = RunFailure(
                    version=exc.context.version,
                    name=exc.context.name,
                    error_type=type(exc).__name__,
                    message=exc.message,
                )
            else:
                result.failure = RunFailure(None, None, type(exc).__name__, str(exc))
        if isinstance(exc, MigrationError) and exc.result is None:
            exc.result = result
        logger.error(
            "migration.run.failed",
            version=result.failure.version,
            error_type=result.failure.error_type,
            error=result.failure.message,
            applied=result.applied_count,
        )


__all__ = ["MigrationRunner"]
