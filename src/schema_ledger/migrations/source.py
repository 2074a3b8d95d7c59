"""Migration source: change-scripts discovered from a directory.

Each file ``<version><suffix>`` is one change-script. The version is the
file name without its extension and must sort lexicographically in the
intended application order, which is why new scripts get a
``YYYYMMDDHHMMSS_`` prefix.
"""

from __future__ import annotations

from pathlib import Path

from schema_ledger.errors import SourceReadError
from schema_ledger.logging import get_logger

from .models import ChangeScript

logger = get_logger(__name__)

DEFAULT_SUFFIX = ".sql"


class MigrationSource:
    """Lists and loads change-scripts from ``directory``.

    Parameters
    ----------
    directory
        Folder holding the migration files. Created on first listing if it
        does not exist.
    suffix
        File suffix of change-scripts (case-sensitive). Other files are
        ignored.
    """

    def __init__(self, directory: Path | str, *, suffix: str = DEFAULT_SUFFIX) -> None:
        self._directory = Path(directory)
        self._suffix = suffix

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def suffix(self) -> str:
        return self._suffix

    def list_available(self) -> list[ChangeScript]:
        """Return change-scripts sorted ascending by version.

        A missing directory is created and yields an empty list.
        """
        if not self._directory.exists():
            logger.info("migration.source.created", directory=str(self._directory))
            self._directory.mkdir(parents=True, exist_ok=True)
            return []

        scripts = [
            ChangeScript.from_path(path, self._suffix)
            for path in self._directory.iterdir()
            if path.is_file() and path.name.endswith(self._suffix) and path.name != self._suffix
        ]
        scripts.sort(key=lambda s: s.version)
        return scripts

    def load(self, script: ChangeScript) -> str:
        """Read the raw content of ``script``.

        Raises:
            SourceReadError: the file vanished or became unreadable after
                listing, or is not valid UTF-8.
        """
        try:
            return script.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceReadError(str(script.path), cause=exc) from exc
