"""
Deterministic hashing for migration content and lock keys.

Manifesto:
    A migration's checksum must be reproducible byte-for-byte across
    machines and releases, otherwise drift detection cries wolf. Both helpers
    are thin wrappers over SHA-256 with no normalization beyond UTF-8
    encoding: a whitespace edit is an edit.

Examples:
    >>> compute_checksum("CREATE TABLE t (id INTEGER);")
    '6c8f...'  # 64-char hex string

    >>> compute_hash("schema_migrations", length=15)
    '3b1f...'  # 15-char hex string

Tags:
    hashing, checksum, drift-detection, schema-ledger
"""

import hashlib
from typing import Any

CHECKSUM_LENGTH = 64


def compute_hash(*values: Any, length: int = 32) -> str:
    """
    Compute deterministic hash from values.

    Values are joined with ``|`` after ``str()`` conversion, so the hash is
    order-dependent: ``compute_hash("a", "b") != compute_hash("b", "a")``.

    Args:
        *values: Values to hash (converted to strings)
        length: Hex digest length (default 32 = 128 bits)

    Returns:
        Hex string of specified length
    """
    content = "|".join(str(v) for v in values)
    return hashlib.sha256(content.encode()).hexdigest()[:length]


def compute_checksum(content: str) -> str:
    """SHA-256 hex digest of raw migration content, as stored in the ledger."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()
