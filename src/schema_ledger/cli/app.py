"""
Root Typer application for the schema-ledger CLI.

Commands:
    migrate   apply pending change-scripts
    create    author a new timestamped change-script
    status    show applied and pending scripts
    verify    report applied scripts whose file changed since
"""

from __future__ import annotations

import typer
from rich.markup import escape
from typer import Typer

from schema_ledger.cli.utils import (
    build_runner,
    console,
    err_console,
    fail,
    load_settings,
    print_run_result,
    print_status,
)
from schema_ledger.errors import SchemaLedgerError
from schema_ledger.logging import configure_logging

app = Typer(
    name="schema-ledger",
    help="schema-ledger: ordered, append-only SQL schema migrations.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

_DATABASE_URL = typer.Option(
    None, "--database-url", "-d", help="Database URL (default: SCHEMA_LEDGER_DATABASE_URL)."
)
_MIGRATIONS_DIR = typer.Option(
    None, "--migrations-dir", "-m", help="Directory of change-scripts (default: SCHEMA_LEDGER_MIGRATIONS_DIR)."
)
_JSON = typer.Option(False, "--json", help="JSON output")


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from schema_ledger import __version__

        typer.echo(f"schema-ledger {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str | None = typer.Option(None, "--log-level", "-l", help="DEBUG, INFO, WARNING, ERROR"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit logs as JSON lines"),
) -> None:
    """schema-ledger CLI: apply and author database migrations."""
    try:
        settings = load_settings()
    except SchemaLedgerError as exc:
        fail(exc)
    level = (log_level or settings.log_level).upper()
    configure_logging(level=level, json_format=json_logs or settings.json_logs)


# ── Commands ─────────────────────────────────────────────────────────────


@app.command()
def migrate(
    database_url: str | None = _DATABASE_URL,
    migrations_dir: str | None = _MIGRATIONS_DIR,
    json_out: bool = _JSON,
) -> None:
    """Apply every pending change-script, in version order."""
    runner = build_runner(database_url, migrations_dir)
    try:
        result = runner.migrate()
    except SchemaLedgerError as exc:
        fail(exc, as_json=json_out)
    print_run_result(result, as_json=json_out)


@app.command()
def create(
    name: str | None = typer.Argument(None, help="Migration name, e.g. 'add trades table'"),
    migrations_dir: str | None = _MIGRATIONS_DIR,
) -> None:
    """Create a new, timestamped change-script from the template."""
    if not name or not name.strip():
        err_console.print("[bold red]Error[/bold red]: Please provide a migration name")
        raise typer.Exit(code=1)

    runner = build_runner(migrations_dir=migrations_dir)
    try:
        filename = runner.create_migration(name)
    except SchemaLedgerError as exc:
        fail(exc)
    console.print(f"[green]Created[/green] {escape(str(runner.source.directory / filename))}")


@app.command()
def status(
    database_url: str | None = _DATABASE_URL,
    migrations_dir: str | None = _MIGRATIONS_DIR,
    json_out: bool = _JSON,
) -> None:
    """Show applied and pending change-scripts."""
    runner = build_runner(database_url, migrations_dir)
    try:
        snapshot = runner.status()
    except SchemaLedgerError as exc:
        fail(exc, as_json=json_out)
    print_status(snapshot, as_json=json_out)


@app.command()
def verify(
    database_url: str | None = _DATABASE_URL,
    migrations_dir: str | None = _MIGRATIONS_DIR,
    json_out: bool = _JSON,
) -> None:
    """Check applied change-scripts against their recorded checksums."""
    runner = build_runner(database_url, migrations_dir)
    try:
        drifts = runner.verify()
    except SchemaLedgerError as exc:
        fail(exc, as_json=json_out)

    if json_out:
        console.print_json(
            data=[{"version": d.version, "recorded": d.recorded, "current": d.current} for d in drifts]
        )
    elif drifts:
        for drift in drifts:
            err_console.print(f"[yellow]drifted[/yellow] {escape(drift.version)}")
    else:
        console.print("[green]All applied migrations match their checksums.[/green]")

    if drifts:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
