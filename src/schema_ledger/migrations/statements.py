"""Naive statement splitting for change-scripts.

Scripts are cut on every occurrence of the terminator character. There is
no awareness of string literals, comments, dollar-quoting or procedural
bodies: a terminator inside any of these splits the statement. Authors must
keep the terminator out of literals and comments (or restructure the
statement). Changing the splitting rules changes which existing scripts are
valid.

A fragment that holds nothing but whitespace and ``--`` line comments is
dropped like an empty one, so a freshly authored template (all comments)
applies as a no-op.
"""

from __future__ import annotations

DEFAULT_TERMINATOR = ";"


def _is_blank(fragment: str) -> bool:
    for line in fragment.splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith("--"):
            return False
    return True


def split_statements(content: str, terminator: str = DEFAULT_TERMINATOR) -> list[str]:
    """Split ``content`` into trimmed statements, in source order.

    >>> split_statements("CREATE TABLE a (id INT);\\n\\nCREATE TABLE b (id INT);\\n")
    ['CREATE TABLE a (id INT)', 'CREATE TABLE b (id INT)']
    """
    if not terminator:
        raise ValueError("statement terminator must not be empty")
    return [
        fragment.strip()
        for fragment in content.split(terminator)
        if not _is_blank(fragment)
    ]


__all__ = ["DEFAULT_TERMINATOR", "split_statements"]
