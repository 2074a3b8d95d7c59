"""Database adapter registry and factory.

Manifesto:
    Consumers should never hard-code adapter class names. The registry maps
    database type names to adapter classes; ``adapter_from_url()`` turns the
    configured ``database_url`` into a ready (not yet connected) adapter.

Features:
    - ``AdapterRegistry`` singleton with pre-registered defaults
    - ``register()`` for custom adapters and test doubles
    - ``get_adapter()`` factory: type name + kwargs
    - ``adapter_from_url()``: ``sqlite:///path`` / ``postgresql://...``

Tags:
    database, registry, factory, schema-ledger
"""

from __future__ import annotations

from typing import Any
from urllib.parse import urlsplit

from schema_ledger.errors import ConfigError

from .base import DatabaseAdapter
from .postgresql import PostgreSQLAdapter
from .sqlite import SQLiteAdapter
from .types import DatabaseType


class AdapterRegistry:
    """
    Registry for database adapter factories.

    Pre-registered adapters:
    - ``sqlite``: :class:`SQLiteAdapter`
    - ``postgresql`` / ``postgres``: :class:`PostgreSQLAdapter`
    """

    def __init__(self):
        self._factories: dict[str, type[DatabaseAdapter]] = {}
        self._register_defaults()

    def _register_defaults(self) -> None:
        """Register default adapters."""
        self._factories["sqlite"] = SQLiteAdapter
        self._factories["postgresql"] = PostgreSQLAdapter
        self._factories["postgres"] = PostgreSQLAdapter  # Alias

    def register(self, name: str, adapter_class: type[DatabaseAdapter]) -> None:
        """Register an adapter factory."""
        self._factories[name.lower()] = adapter_class

    def create(self, name: str, **kwargs: Any) -> DatabaseAdapter:
        """Create an adapter by name."""
        name = name.lower()
        if name not in self._factories:
            raise ConfigError(f"Unknown database adapter: {name}")
        return self._factories[name](**kwargs)

    def list_adapters(self) -> list[str]:
        """List registered adapter names."""
        return sorted(self._factories.keys())


# Global registry
adapter_registry = AdapterRegistry()


def get_adapter(
    db_type: DatabaseType | str,
    **kwargs: Any,
) -> DatabaseAdapter:
    """
    Get a database adapter by type.

    Usage:
        adapter = get_adapter(DatabaseType.SQLITE, path="data.db")
        adapter = get_adapter("postgresql", dsn="postgresql://localhost/app")
    """
    name = db_type.value if isinstance(db_type, DatabaseType) else db_type
    return adapter_registry.create(name, **kwargs)


def adapter_from_url(url: str, *, connect_timeout: int = 10) -> DatabaseAdapter:
    """
    Build an adapter from a database URL.

    Supported forms:
        ``sqlite:///relative/path.db``, ``sqlite:////abs/path.db``,
        ``sqlite:///:memory:``, ``postgresql://user:pw@host:5432/db``
        (``postgres://`` and ``postgresql+psycopg://`` are accepted too).
    """
    scheme, sep, rest = url.partition("://")
    if not sep:
        raise ConfigError(f"Invalid database URL: {url!r}")

    backend = scheme.split("+", 1)[0].lower()

    if backend == "sqlite":
        # sqlite:///data/app.db -> data/app.db, sqlite:////tmp/app.db -> /tmp/app.db
        path = rest[1:] if rest.startswith("/") else rest
        return get_adapter(DatabaseType.SQLITE, path=path or ":memory:", timeout=float(connect_timeout))

    if backend in ("postgresql", "postgres"):
        parts = urlsplit(url)
        dsn = parts._replace(scheme="postgresql").geturl()
        return get_adapter(DatabaseType.POSTGRESQL, dsn=dsn, connect_timeout=connect_timeout)

    # Custom registrations receive the raw URL
    return adapter_registry.create(backend, url=url)


__all__ = [
    "AdapterRegistry",
    "adapter_registry",
    "get_adapter",
    "adapter_from_url",
]
