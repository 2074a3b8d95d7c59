"""Authoring helper: create a new, templated change-script.

The version is the UTC timestamp down to the second followed by the
normalized name, e.g. ``20240315093000_add_trades_table``. Two scripts
authored with the same name in the same second collide; this is accepted
for an operator-driven workflow.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime
from pathlib import Path

from schema_ledger.errors import InvalidMigrationNameError
from schema_ledger.logging import get_logger

from .models import VERSION_SEPARATOR
from .source import DEFAULT_SUFFIX

logger = get_logger(__name__)

TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"

_WHITESPACE = re.compile(r"\s+")
_TIMESTAMP_PREFIX = re.compile(r"^(\d{14})" + re.escape(VERSION_SEPARATOR) + r"(.*)$")

TEMPLATE = """\
-- Migration: {name}
-- Created: {created}
-- Description: Add your SQL statements here
--
-- Statements are split on every semicolon, including ones inside literals and comments.
--
-- Example:
-- CREATE TABLE IF NOT EXISTS example_table (
--     id SERIAL PRIMARY KEY,
--     name VARCHAR(255) NOT NULL,
--     created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
-- )

-- Add your migration SQL here
"""


def normalize_name(name: str | None) -> str:
    """Collapse whitespace runs into the version separator."""
    stripped = (name or "").strip()
    if not stripped:
        raise InvalidMigrationNameError(name)
    return _WHITESPACE.sub(VERSION_SEPARATOR, stripped)


def build_version(name: str, now: datetime | None = None) -> str:
    """``YYYYMMDDHHMMSS_<normalized name>`` for ``now`` (UTC)."""
    moment = now or datetime.now(UTC)
    return f"{moment.strftime(TIMESTAMP_FORMAT)}{VERSION_SEPARATOR}{normalize_name(name)}"


def split_version(version: str) -> tuple[str | None, str]:
    """Split a version into its timestamp prefix and a readable title.

    >>> split_version("20240315093000_add_trades_table")
    ('20240315093000', 'add trades table')
    """
    match = _TIMESTAMP_PREFIX.match(version)
    if match is None:
        return None, version.replace(VERSION_SEPARATOR, " ")
    return match.group(1), match.group(2).replace(VERSION_SEPARATOR, " ")


def render_template(name: str, created: datetime) -> str:
    return TEMPLATE.format(name=name.strip(), created=created.isoformat())


def create_migration(
    directory: Path | str,
    name: str,
    *,
    suffix: str = DEFAULT_SUFFIX,
    now: datetime | None = None,
) -> Path:
    """Write a new templated change-script into ``directory`` and return its path."""
    moment = now or datetime.now(UTC)
    version = build_version(name, moment)

    target_dir = Path(directory)
    target_dir.mkdir(parents=True, exist_ok=True)

    path = target_dir / f"{version}{suffix}"
    path.write_text(render_template(name, moment), encoding="utf-8")

    logger.info("migration.created", version=version, path=str(path))
    return path


__all__ = [
    "TIMESTAMP_FORMAT",
    "TEMPLATE",
    "normalize_name",
    "build_version",
    "split_version",
    "render_template",
    "create_migration",
]
