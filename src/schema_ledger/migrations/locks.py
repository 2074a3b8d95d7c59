"""Run-level locks acquired before diffing.

The runner itself has no coordination logic: it accepts a lock factory and
holds the lock from the end of initialization until the run finishes. Two
runners against the same PostgreSQL ledger then serialize on a session
advisory lock instead of racing into the ledger's unique constraint.

SQLite has no advisory locks; a single-file database is expected to be
migrated by a single process, so the lock is a no-op there.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import AbstractContextManager, contextmanager

from schema_ledger.adapters.base import DatabaseAdapter
from schema_ledger.adapters.types import DatabaseType
from schema_ledger.errors import DatabaseError
from schema_ledger.hashing import compute_hash
from schema_ledger.logging import get_logger

logger = get_logger(__name__)

LockFactory = Callable[[DatabaseAdapter], AbstractContextManager[None]]


def lock_key_for(name: str) -> int:
    """Stable 60-bit key for ``pg_advisory_lock`` (fits a signed bigint)."""
    return int(compute_hash("schema-ledger", name, length=15), 16)


@contextmanager
def null_lock(adapter: DatabaseAdapter) -> Iterator[None]:  # noqa: ARG001
    """Lock that does nothing."""
    yield


@contextmanager
def postgres_advisory_lock(adapter: DatabaseAdapter, key: int) -> Iterator[None]:
    """Hold a session-level advisory lock; blocks until it is granted."""
    logger.debug("migration.lock.waiting", key=key)
    adapter.execute("SELECT pg_advisory_lock(%s)", (key,))
    logger.debug("migration.lock.acquired", key=key)
    try:
        yield
    finally:
        try:
            adapter.execute("SELECT pg_advisory_unlock(%s)", (key,))
        except DatabaseError as exc:
            # Session locks die with the connection, which the runner closes next.
            logger.warning("migration.lock.release_failed", key=key, error=str(exc))
        else:
            logger.debug("migration.lock.released", key=key)


def advisory_lock(name: str) -> LockFactory:
    """Lock factory keyed by ``name`` (normally the ledger table name).

    Picks the PostgreSQL advisory lock or the no-op lock based on the
    adapter the runner hands in.
    """
    key = lock_key_for(name)

    def factory(adapter: DatabaseAdapter) -> AbstractContextManager[None]:
        if adapter.db_type == DatabaseType.POSTGRESQL:
            return postgres_advisory_lock(adapter, key)
        return null_lock(adapter)

    return factory


__all__ = [
    "LockFactory",
    "lock_key_for",
    "null_lock",
    "postgres_advisory_lock",
    "advisory_lock",
]
