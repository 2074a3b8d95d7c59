"""Tests for schema_ledger.logging: structlog configuration and context."""

from __future__ import annotations

import json
import logging

import structlog

from schema_ledger.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)


class TestConfigureLogging:
    def test_json_output(self, capsys):
        configure_logging(level="INFO", json_format=True, service="test-svc")
        # Route through a fresh handler so the test does not depend on basicConfig state.
        handler = logging.StreamHandler()
        root = logging.getLogger()
        root.addHandler(handler)
        try:
            get_logger("schema_ledger.test").info("migration.applied", version="v1")
        finally:
            root.removeHandler(handler)

        lines = [line for line in capsys.readouterr().err.splitlines() if "migration.applied" in line]
        assert lines
        event = json.loads(lines[-1])
        assert event["event"] == "migration.applied"
        assert event["version"] == "v1"
        assert event["service.name"] == "test-svc"
        assert event["log.level"] == "info"
        assert "@timestamp" in event

    def test_level_filters(self, capsys):
        configure_logging(level="WARNING", json_format=True)
        handler = logging.StreamHandler()
        root = logging.getLogger()
        root.addHandler(handler)
        try:
            get_logger("schema_ledger.test").info("migration.hidden")
        finally:
            root.removeHandler(handler)
        assert "migration.hidden" not in capsys.readouterr().err


class TestContext:
    def test_bind_and_unbind(self):
        bind_context(run_id="abc")
        assert structlog.contextvars.get_contextvars() == {"run_id": "abc"}
        unbind_context("run_id")
        assert structlog.contextvars.get_contextvars() == {}

    def test_clear(self):
        bind_context(a=1, b=2)
        clear_context()
        assert structlog.contextvars.get_contextvars() == {}
