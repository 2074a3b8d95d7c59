"""Tests for the migration ledger table."""

from __future__ import annotations

import pytest

from schema_ledger.errors import ConfigError, DuplicateVersionError
from schema_ledger.migrations import MigrationLedger
from schema_ledger.migrations.ledger import validate_table_name


@pytest.fixture()
def ledger(adapter) -> MigrationLedger:
    adapter.connect()
    ledger = MigrationLedger(adapter)
    ledger.ensure_schema()
    return ledger


class TestEnsureSchema:
    def test_creates_table(self, ledger, tables):
        assert "schema_migrations" in tables()

    def test_idempotent(self, ledger):
        ledger.record("v1", "v1", 1, "a" * 64)
        ledger.ensure_schema()
        assert ledger.list_applied() == ["v1"]

    def test_custom_table(self, adapter, tables):
        adapter.connect()
        MigrationLedger(adapter, "_migrations").ensure_schema()
        assert "_migrations" in tables()


class TestRecord:
    def test_list_applied_in_insertion_order(self, ledger):
        ledger.record("20240301000000_c", "c", 1, "c" * 64)
        ledger.record("20240101000000_a", "a", 2, "a" * 64)
        assert ledger.list_applied() == ["20240301000000_c", "20240101000000_a"]

    def test_entries(self, ledger):
        ledger.record("20240101000000_init", "20240101000000 init", 17, "f" * 64)
        (entry,) = ledger.entries()
        assert entry.id == 1
        assert entry.version == "20240101000000_init"
        assert entry.name == "20240101000000 init"
        assert entry.execution_time == 17
        assert entry.checksum == "f" * 64
        assert entry.executed_at is not None

    def test_duplicate_version(self, ledger):
        ledger.record("v1", "v1", 1, "a" * 64)
        with pytest.raises(DuplicateVersionError) as exc_info:
            ledger.record("v1", "v1", 1, "a" * 64)
        assert exc_info.value.version == "v1"
        assert ledger.list_applied() == ["v1"]


class TestValidateTableName:
    @pytest.mark.parametrize("name", ["schema_migrations", "_m", "ops.schema_migrations", "M2"])
    def test_valid(self, name):
        assert validate_table_name(name) == name

    @pytest.mark.parametrize("name", ["", "2fast", "a-b", "x; DROP TABLE y", "a.b.c", '"quoted"'])
    def test_invalid(self, name):
        with pytest.raises(ConfigError):
            validate_table_name(name)
