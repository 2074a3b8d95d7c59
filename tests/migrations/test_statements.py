"""Tests for naive statement splitting."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from schema_ledger.migrations import split_statements
from schema_ledger.migrations.authoring import render_template


class TestSplitStatements:
    def test_splits_and_trims(self):
        sql = "CREATE TABLE a (id INT);\n\n  CREATE TABLE b (id INT);\n"
        assert split_statements(sql) == ["CREATE TABLE a (id INT)", "CREATE TABLE b (id INT)"]

    def test_last_statement_without_terminator(self):
        assert split_statements("SELECT 1; SELECT 2") == ["SELECT 1", "SELECT 2"]

    def test_empty_fragments_dropped(self):
        assert split_statements(";;\n;  ;") == []
        assert split_statements("") == []

    def test_comment_only_fragments_dropped(self):
        sql = "-- header\n-- more\n;\nSELECT 1;\n-- trailing comment\n"
        assert split_statements(sql) == ["SELECT 1"]

    def test_leading_comment_kept_with_statement(self):
        assert split_statements("-- create it\nCREATE TABLE a (id INT);") == ["-- create it\nCREATE TABLE a (id INT)"]

    def test_terminator_inside_literal_splits(self):
        # Naive by contract: literals are not protected.
        assert split_statements("INSERT INTO t VALUES ('a;b');") == ["INSERT INTO t VALUES ('a", "b')"]

    def test_custom_terminator(self):
        assert split_statements("SELECT 1\nGO\nSELECT 2", terminator="GO") == ["SELECT 1", "SELECT 2"]

    def test_empty_terminator_rejected(self):
        with pytest.raises(ValueError):
            split_statements("SELECT 1", terminator="")

    def test_authoring_template_has_no_statements(self):
        assert split_statements(render_template("add trades", datetime(2024, 3, 15, tzinfo=UTC))) == []
