"""Tests for the migration source (directory of change-scripts)."""

from __future__ import annotations

from pathlib import Path

import pytest

from schema_ledger.errors import SourceReadError
from schema_ledger.migrations import ChangeScript, MigrationSource


class TestListAvailable:
    def test_sorted_by_version_not_creation_order(self, migrations_dir: Path):
        for version in ("20240301000000_c", "20240101000000_a", "20240201000000_b"):
            (migrations_dir / f"{version}.sql").write_text("SELECT 1;", encoding="utf-8")

        scripts = MigrationSource(migrations_dir).list_available()
        assert [s.version for s in scripts] == [
            "20240101000000_a",
            "20240201000000_b",
            "20240301000000_c",
        ]

    def test_name_replaces_separators(self, migrations_dir: Path):
        (migrations_dir / "20240101000000_add_trades_table.sql").write_text("", encoding="utf-8")
        (script,) = MigrationSource(migrations_dir).list_available()
        assert script.name == "20240101000000 add trades table"
        assert script.filename == "20240101000000_add_trades_table.sql"

    def test_ignores_other_files_and_directories(self, migrations_dir: Path):
        (migrations_dir / "20240101000000_a.sql").write_text("", encoding="utf-8")
        (migrations_dir / "README.md").write_text("docs", encoding="utf-8")
        (migrations_dir / "20240102000000_b.SQL").write_text("", encoding="utf-8")
        (migrations_dir / "20240103000000_c.sql.bak").write_text("", encoding="utf-8")
        (migrations_dir / "nested.sql").mkdir()

        versions = [s.version for s in MigrationSource(migrations_dir).list_available()]
        assert versions == ["20240101000000_a"]

    def test_missing_directory_is_created(self, tmp_path: Path):
        target = tmp_path / "db" / "migrations"
        assert MigrationSource(target).list_available() == []
        assert target.is_dir()

    def test_custom_suffix(self, migrations_dir: Path):
        (migrations_dir / "20240101000000_a.up.sql").write_text("", encoding="utf-8")
        (migrations_dir / "20240101000000_b.sql").write_text("", encoding="utf-8")
        (script,) = MigrationSource(migrations_dir, suffix=".up.sql").list_available()
        assert script.version == "20240101000000_a"


class TestLoad:
    def test_reads_raw_content(self, migrations_dir: Path):
        path = migrations_dir / "20240101000000_a.sql"
        path.write_text("CREATE TABLE t (id INTEGER);\n", encoding="utf-8")
        source = MigrationSource(migrations_dir)
        (script,) = source.list_available()
        assert source.load(script) == "CREATE TABLE t (id INTEGER);\n"

    def test_vanished_file(self, migrations_dir: Path):
        path = migrations_dir / "20240101000000_a.sql"
        path.write_text("", encoding="utf-8")
        source = MigrationSource(migrations_dir)
        (script,) = source.list_available()
        path.unlink()

        with pytest.raises(SourceReadError) as exc_info:
            source.load(script)
        assert exc_info.value.path == str(path)

    def test_invalid_utf8(self, migrations_dir: Path):
        path = migrations_dir / "20240101000000_a.sql"
        path.write_bytes(b"CREATE TABLE t (x TEXT DEFAULT '\xff');")
        source = MigrationSource(migrations_dir)
        (script,) = source.list_available()

        with pytest.raises(SourceReadError) as exc_info:
            source.load(script)
        assert exc_info.value.path == str(path)
        assert isinstance(exc_info.value.cause, UnicodeDecodeError)


class TestChangeScript:
    def test_from_path(self):
        script = ChangeScript.from_path(Path("/m/20240101000000_init.sql"))
        assert script.version == "20240101000000_init"
        assert script.name == "20240101000000 init"
