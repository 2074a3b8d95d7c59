"""
CLI utility helpers: runner construction and output formatting.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any, NoReturn

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from schema_ledger.errors import ConfigError, MigrationError, SchemaLedgerError
from schema_ledger.migrations import MigrationRunner, MigrationStatus, RunResult
from schema_ledger.settings import MigrateSettings, get_settings

console = Console()
err_console = Console(stderr=True)


# ── Runner helper ────────────────────────────────────────────────────────


def load_settings(
    database_url: str | None = None,
    migrations_dir: str | None = None,
) -> MigrateSettings:
    """Cached settings with command-line overrides applied on top."""
    overrides = {
        key: value
        for key, value in {"database_url": database_url, "migrations_dir": migrations_dir}.items()
        if value is not None
    }
    try:
        settings = get_settings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}", cause=exc) from exc
    return settings.model_copy(update=overrides) if overrides else settings


def build_runner(
    database_url: str | None = None,
    migrations_dir: str | None = None,
) -> MigrationRunner:
    """Create a runner for CLI commands; exits with code 1 on bad configuration."""
    try:
        return MigrationRunner.from_settings(load_settings(database_url, migrations_dir))
    except SchemaLedgerError as exc:
        fail(exc)


# ── Output helpers ───────────────────────────────────────────────────────


def fail(exc: SchemaLedgerError, *, as_json: bool = False) -> NoReturn:
    """Report a schema-ledger error and exit with code 1."""
    if as_json:
        console.print_json(json.dumps(exc.to_dict(), default=str))
        raise typer.Exit(code=1)

    err_console.print(f"[bold red]Error[/bold red] ({exc.category.value}): {escape(exc.message)}")
    if exc.cause is not None:
        err_console.print(f"  [dim]cause:[/dim] {escape(str(exc.cause))}")
    if isinstance(exc, MigrationError) and exc.result is not None:
        applied = ", ".join(exc.result.applied) or "none"
        err_console.print(f"  [dim]applied before failure:[/dim] {escape(applied)}")
    raise typer.Exit(code=1)


def print_run_result(result: RunResult, *, as_json: bool = False) -> None:
    """Render a successful ``migrate`` run."""
    if as_json:
        console.print_json(json.dumps(result.to_dict(), default=str))
        return

    _print_dict(
        {
            "discovered": result.discovered,
            "already applied": result.already_applied,
            "newly applied": result.applied_count,
            "duration ms": result.duration_ms,
        },
        title="Migration Run",
    )
    for version in result.applied:
        console.print(f"  [green]applied[/green] {escape(version)}")
    for version in result.drifted:
        console.print(f"  [yellow]drifted[/yellow] {escape(version)}")
    if not result.applied:
        console.print("[dim]Database is up to date.[/dim]")


def print_status(status: MigrationStatus, *, as_json: bool = False) -> None:
    """Render applied and pending scripts."""
    if as_json:
        payload = {
            "applied": [asdict(entry) for entry in status.applied],
            "pending": [script.version for script in status.pending],
            "drifted": [drift.version for drift in status.drifted],
            "up_to_date": status.is_up_to_date,
        }
        console.print_json(json.dumps(payload, default=str))
        return

    if status.applied:
        _print_table(
            [
                {
                    "version": entry.version,
                    "executed_at": entry.executed_at,
                    "ms": entry.execution_time,
                }
                for entry in status.applied
            ],
            title="Applied",
        )
    else:
        console.print("[dim]No migrations applied.[/dim]")

    if status.pending:
        _print_table(
            [{"version": script.version, "file": script.filename} for script in status.pending],
            title="Pending",
        )
    else:
        console.print("[dim]No pending migrations.[/dim]")

    for drift in status.drifted:
        console.print(f"[yellow]drifted[/yellow] {escape(drift.version)}")


# ── Private helpers ──────────────────────────────────────────────────────


def _print_table(items: list[dict[str, Any]], *, title: str = "") -> None:
    """Render a list of dicts as a Rich table."""
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in items[0]:
        table.add_column(col, overflow="fold")
    for item in items:
        table.add_row(*(escape(str(v)) for v in item.values()))
    console.print(table)


def _print_dict(data: dict[str, Any], *, title: str = "") -> None:
    """Render a single dict as key-value pairs."""
    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in data.items():
        console.print(f"  [cyan]{k}[/cyan]: {v}")
