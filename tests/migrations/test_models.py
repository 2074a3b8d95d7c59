"""Tests for migration value types."""

from __future__ import annotations

from pathlib import Path

from schema_ledger.migrations import ChangeScript, MigrationStatus, RunFailure, RunResult


class TestRunResult:
    def test_empty_result_is_success(self):
        r = RunResult()
        assert r.success is True
        assert r.applied_count == 0
        assert r.pending_count == 0

    def test_counts(self):
        r = RunResult(discovered=5, already_applied=3, applied=["a", "b"])
        assert r.applied_count == 2
        assert r.pending_count == 2

    def test_failure(self):
        r = RunResult(failure=RunFailure("v", "v", "MigrationExecutionError", "boom"))
        assert r.success is False

    def test_to_dict(self):
        d = RunResult(discovered=1, applied=["a"]).to_dict()
        assert d["applied"] == ["a"]
        assert d["applied_count"] == 1
        assert d["success"] is True
        assert d["failure"] is None


class TestMigrationStatus:
    def test_up_to_date(self):
        assert MigrationStatus().is_up_to_date is True
        pending = [ChangeScript.from_path(Path("20240101000000_a.sql"))]
        assert MigrationStatus(pending=pending).is_up_to_date is False
