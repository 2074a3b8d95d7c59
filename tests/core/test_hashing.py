"""Tests for schema_ledger.hashing."""

from __future__ import annotations

import hashlib

from schema_ledger.hashing import CHECKSUM_LENGTH, compute_checksum, compute_hash


class TestComputeChecksum:
    def test_is_sha256_of_utf8(self):
        content = "CREATE TABLE café (id INTEGER);"
        assert compute_checksum(content) == hashlib.sha256(content.encode("utf-8")).hexdigest()

    def test_length(self):
        assert len(compute_checksum("")) == CHECKSUM_LENGTH

    def test_whitespace_is_significant(self):
        assert compute_checksum("SELECT 1") != compute_checksum("SELECT 1 ")


class TestComputeHash:
    def test_deterministic(self):
        assert compute_hash("a", "b") == compute_hash("a", "b")

    def test_order_dependent(self):
        assert compute_hash("a", "b") != compute_hash("b", "a")

    def test_length(self):
        assert len(compute_hash("schema_migrations", length=15)) == 15
