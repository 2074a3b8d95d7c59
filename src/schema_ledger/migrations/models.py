"""Value types shared by the migration source, ledger and runner."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

#: Separator between words of a version; replaced by spaces in the display name.
VERSION_SEPARATOR = "_"


class RunnerState(str, Enum):
    """Lifecycle of a single migration run."""

    IDLE = "idle"
    INITIALIZING = "initializing"
    DIFFING = "diffing"
    APPLYING = "applying"
    COMPLETED = "completed"
    FAILED = "failed"


class ChecksumMode(str, Enum):
    """What a run does when an applied script's content changed on disk."""

    OFF = "off"
    WARN = "warn"
    ERROR = "error"


def name_for_version(version: str) -> str:
    """Human-readable name of a version: separators become spaces."""
    return version.replace(VERSION_SEPARATOR, " ")


@dataclass(frozen=True)
class ChangeScript:
    """One migration file. Content is read at apply time, never cached."""

    version: str
    name: str
    path: Path

    @classmethod
    def from_path(cls, path: Path, suffix: str = ".sql") -> ChangeScript:
        version = path.name[: -len(suffix)] if suffix and path.name.endswith(suffix) else path.stem
        return cls(version=version, name=name_for_version(version), path=path)

    @property
    def filename(self) -> str:
        return self.path.name


@dataclass(frozen=True)
class LedgerEntry:
    """One row of the ledger table."""

    id: int
    version: str
    name: str
    executed_at: Any
    checksum: str | None
    execution_time: int | None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> LedgerEntry:
        return cls(
            id=row["id"],
            version=row["version"],
            name=row["name"],
            executed_at=row.get("executed_at"),
            checksum=row.get("checksum"),
            execution_time=row.get("execution_time"),
        )


@dataclass(frozen=True)
class ChecksumDrift:
    """An applied script whose file no longer matches the recorded checksum."""

    version: str
    recorded: str
    current: str


@dataclass
class RunFailure:
    """What stopped a run. ``version`` is None when no single script is to blame."""

    version: str | None
    name: str | None
    error_type: str
    message: str


@dataclass
class RunResult:
    """Summary of one ``migrate()`` call."""

    discovered: int = 0
    already_applied: int = 0
    applied: list[str] = field(default_factory=list)
    drifted: list[str] = field(default_factory=list)
    failure: RunFailure | None = None
    duration_ms: float = 0.0

    @property
    def applied_count(self) -> int:
        return len(self.applied)

    @property
    def pending_count(self) -> int:
        return self.discovered - self.already_applied

    @property
    def success(self) -> bool:
        return self.failure is None

    def to_dict(self) -> dict[str, Any]:
        result = asdict(self)
        result["applied_count"] = self.applied_count
        result["success"] = self.success
        return result


@dataclass
class MigrationStatus:
    """Snapshot of the ledger against the source, without applying anything."""

    applied: list[LedgerEntry] = field(default_factory=list)
    pending: list[ChangeScript] = field(default_factory=list)
    drifted: list[ChecksumDrift] = field(default_factory=list)

    @property
    def is_up_to_date(self) -> bool:
        return not self.pending


__all__ = [
    "VERSION_SEPARATOR",
    "RunnerState",
    "ChecksumMode",
    "name_for_version",
    "ChangeScript",
    "LedgerEntry",
    "ChecksumDrift",
    "RunFailure",
    "RunResult",
    "MigrationStatus",
]
