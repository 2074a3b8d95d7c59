"""Command-line interface (``schema-ledger``)."""

from schema_ledger.cli.app import app

__all__ = ["app"]
