"""schemaledger CLI — apply migrations, inspect the ledger.

`schemaledger apply` runs every migration from a directory or script.
`schemaledger status` compares them against the ledger without applying.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from schemaledger.cli.context import configure_logging, run_async
from schemaledger.config import settings
from schemaledger.digest import compute_digest
from schemaledger.events.bus import APPLYING, EventBus, MigrationEvent
from schemaledger.exceptions import ConflictError, SchemaLedgerError
from schemaledger.loader import load_path
from schemaledger.runner import MigrationRunner
from schemaledger.status import StatusReport, migration_status
from schemaledger.store import SqliteStore
from schemaledger.types import Outcome, RunReport

console = Console()

app = typer.Typer(
    name="schemaledger",
    help="schemaledger -- apply ordered migrations exactly once.",
    no_args_is_help=True,
)


@app.callback()
def main(
    log_level: str = typer.Option(settings.log_level, "--log-level", help="Log level"),
):
    configure_logging(log_level)


def _open_store(db: Path | None) -> SqliteStore:
    return SqliteStore(
        db or settings.db_path,
        table=settings.ledger_table,
        busy_timeout=settings.busy_timeout_seconds,
    )


@app.command("apply")
def apply(
    source: Optional[Path] = typer.Argument(None, help="Migrations directory or script"),
    db: Optional[Path] = typer.Option(None, "--db", help="SQLite database path"),
):
    """Apply every migration that has not run yet, in order."""
    try:
        migrations = load_path(source or settings.migrations_dir)
    except SchemaLedgerError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    results = []
    bus = EventBus()

    async def _progress(event: MigrationEvent) -> None:
        console.print(f"[dim]applying {escape(event.migration_id)}[/dim]")

    bus.subscribe(_progress, pattern=APPLYING)

    async def _apply() -> RunReport:
        async with _open_store(db) as store:
            runner = MigrationRunner(
                store.ledger,
                store.executor,
                event_bus=bus,
                digest_algorithm=settings.digest_algorithm,
                max_race_retries=settings.max_race_retries,
            )
            # One at a time so results survive a failure midway
            for migration in migrations:
                results.append(await runner.apply(migration.id, migration.body))
            return RunReport(results=results)

    try:
        report = run_async(_apply())
    except ConflictError as e:
        _print_results(results)
        console.print(f"[red]Conflict:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)
    except Exception as e:
        _print_results(results)
        console.print(f"[red]Migration failed:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)

    _print_results(report.results)
    console.print(
        f"{len(report.applied)} applied, {len(report.skipped)} skipped"
    )


def _print_results(results) -> None:
    if not results:
        return
    table = Table(title="Migrations")
    table.add_column("Migration", style="white")
    table.add_column("Outcome", style="cyan")
    table.add_column("Digest", style="dim")
    for r in results:
        style = "green" if r.outcome == Outcome.APPLIED else "dim"
        table.add_row(escape(r.migration_id), f"[{style}]{r.outcome.value}[/{style}]", r.digest)
    console.print(table)


@app.command("status")
def status(
    source: Optional[Path] = typer.Argument(None, help="Migrations directory or script"),
    db: Optional[Path] = typer.Option(None, "--db", help="SQLite database path"),
):
    """Show applied, pending and modified migrations."""
    try:
        migrations = load_path(source or settings.migrations_dir)
    except SchemaLedgerError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    async def _status() -> StatusReport:
        async with _open_store(db) as store:
            return await migration_status(
                store.ledger, migrations, digest_algorithm=settings.digest_algorithm
            )

    report = run_async(_status())

    table = Table(title="Migration Status")
    table.add_column("Migration", style="white")
    table.add_column("State", style="cyan")
    for record in report.applied:
        table.add_row(escape(record.id), "[green]applied[/green]")
    for migration_id in report.pending:
        table.add_row(escape(migration_id), "[yellow]pending[/yellow]")
    for m in report.modified:
        table.add_row(escape(m.migration_id), "[red]modified[/red]")
    for record in report.unknown:
        table.add_row(escape(record.id), "[dim]unknown[/dim]")
    console.print(table)

    console.print(
        f"{len(report.applied)} applied, {len(report.pending)} pending, "
        f"{len(report.modified)} modified, {len(report.unknown)} unknown"
    )
    if not report.clean:
        raise typer.Exit(code=1)


@app.command("digest")
def digest(
    path: Path = typer.Argument(
        help="File whose contents to fingerprint",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
):
    """Print the digest a migration body would be recorded with."""
    body = path.read_text(encoding="utf-8")
    console.print(compute_digest(body, settings.digest_algorithm))


@app.command("version")
def version_cmd():
    """Show schemaledger version."""
    from schemaledger import __version__
    console.print(f"schemaledger v{__version__}")
