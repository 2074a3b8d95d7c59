"""Tests for schema_ledger.timing."""

from __future__ import annotations

import pytest

from schema_ledger.timing import TimingResult, timed_block


class TestTimingResult:
    def test_stop_is_idempotent(self):
        t = TimingResult(step="x")
        t.stop()
        first = t.ended_at
        t.stop()
        assert t.ended_at == first

    def test_elapsed_ms_is_whole_milliseconds(self):
        t = TimingResult(step="x", started_at=10.0, ended_at=10.0126)
        assert t.elapsed_ms == 13
        assert isinstance(t.elapsed_ms, int)

    def test_log_dict_includes_metrics(self):
        t = TimingResult(step="x", started_at=1.0, ended_at=1.5).add_metric("statements", 2)
        assert t.to_log_dict() == {"duration_ms": 500.0, "statements": 2}


class TestTimedBlock:
    def test_stops_timer(self):
        with timed_block("apply") as t:
            pass
        assert t.ended_at is not None
        assert t.error_info is None

    def test_records_error_and_reraises(self):
        with pytest.raises(RuntimeError):
            with timed_block("apply") as t:
                raise RuntimeError("boom")
        assert t.error_info["error_type"] == "RuntimeError"
