"""Tests for the schema-ledger CLI via typer's CliRunner."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from schema_ledger import __version__
from schema_ledger.cli.app import app

runner = CliRunner()


@pytest.fixture()
def db_args(tmp_path: Path, migrations_dir: Path) -> list[str]:
    return [
        "--database-url",
        f"sqlite:///{tmp_path / 'cli.db'}",
        "--migrations-dir",
        str(migrations_dir),
    ]


def invoke(*args: str):
    return runner.invoke(app, ["--log-level", "WARNING", *args])


class TestRoot:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"schema-ledger {__version__}" in result.output

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert "migrate" in result.output
        assert "create" in result.output

    def test_invalid_environment(self, monkeypatch):
        monkeypatch.setenv("SCHEMA_LEDGER_STATEMENT_TERMINATOR", "")
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 1


class TestMigrateCommand:
    def test_applies_scripts(self, db_args, write_script):
        write_script("20240101000000_users", "CREATE TABLE users (id INTEGER PRIMARY KEY);")

        result = invoke("migrate", *db_args)

        assert result.exit_code == 0, result.output
        assert "newly applied: 1" in result.output
        assert "20240101000000_users" in result.output

    def test_up_to_date(self, db_args, write_script):
        write_script("20240101000000_users", "CREATE TABLE users (id INTEGER PRIMARY KEY);")
        invoke("migrate", *db_args)

        result = invoke("migrate", *db_args)

        assert result.exit_code == 0
        assert "already applied: 1" in result.output
        assert "up to date" in result.output

    def test_failure_exits_non_zero(self, db_args, write_script):
        write_script("20240101000000_broken", "INSERT INTO nowhere VALUES (1);")

        result = invoke("migrate", *db_args)

        assert result.exit_code == 1
        assert "20240101000000_broken" in result.output
        assert "nowhere" in result.output

    def test_json_output(self, db_args, write_script):
        write_script("20240101000000_users", "CREATE TABLE users (id INTEGER PRIMARY KEY);")
        result = invoke("migrate", *db_args, "--json")
        assert result.exit_code == 0
        assert '"applied_count": 1' in result.output

    def test_settings_from_environment(self, tmp_path: Path, migrations_dir: Path, write_script, monkeypatch):
        monkeypatch.setenv("SCHEMA_LEDGER_DATABASE_URL", f"sqlite:///{tmp_path / 'env.db'}")
        monkeypatch.setenv("SCHEMA_LEDGER_MIGRATIONS_DIR", str(migrations_dir))
        write_script("20240101000000_users", "CREATE TABLE users (id INTEGER PRIMARY KEY);")

        result = invoke("migrate")

        assert result.exit_code == 0, result.output
        assert (tmp_path / "env.db").exists()


class TestCreateCommand:
    def test_creates_file(self, migrations_dir: Path):
        result = invoke("create", "add trades table", "--migrations-dir", str(migrations_dir))

        assert result.exit_code == 0, result.output
        (created,) = migrations_dir.iterdir()
        assert created.name.endswith("_add_trades_table.sql")

    def test_missing_name(self, migrations_dir: Path):
        result = invoke("create", "--migrations-dir", str(migrations_dir))
        assert result.exit_code == 1
        assert "Please provide a migration name" in result.output
        assert list(migrations_dir.iterdir()) == []

    def test_blank_name(self, migrations_dir: Path):
        result = invoke("create", "   ", "--migrations-dir", str(migrations_dir))
        assert result.exit_code == 1


class TestStatusCommand:
    def test_lists_pending(self, db_args, write_script):
        write_script("20240101000000_users", "CREATE TABLE users (id INTEGER PRIMARY KEY);")

        result = invoke("status", *db_args, "--json")

        assert result.exit_code == 0
        assert '"20240101000000_users"' in result.output
        assert '"up_to_date": false' in result.output

    def test_table_output(self, db_args, write_script):
        write_script("20240101000000_a", "SELECT 1;")
        invoke("migrate", *db_args)

        result = invoke("status", *db_args)

        assert result.exit_code == 0
        assert "Applied" in result.output
        assert "No pending migrations." in result.output


class TestVerifyCommand:
    def test_clean(self, db_args, write_script):
        write_script("20240101000000_a", "SELECT 1;")
        invoke("migrate", *db_args)

        result = invoke("verify", *db_args)

        assert result.exit_code == 0
        assert "match" in result.output

    def test_drift_exits_non_zero(self, db_args, write_script):
        path = write_script("20240101000000_a", "SELECT 1;")
        invoke("migrate", *db_args)
        path.write_text("SELECT 2;", encoding="utf-8")

        result = invoke("verify", *db_args)

        assert result.exit_code == 1
        assert "20240101000000_a" in result.output
