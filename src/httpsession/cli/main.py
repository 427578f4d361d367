"""CLI entry point for httpsession.

Maintenance commands for a ``SQLiteStore`` database, useful from cron or a
shell when the application's own cleanup task is disabled.

Invoked as::

    httpsession [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m httpsession.cli.main

Commands
--------
- version  — Show version information
- purge    — Delete expired session records
- count    — Count live session records
- show     — Display one session record
"""
from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

if TYPE_CHECKING:
    from httpsession.storage.sqlite import SQLiteStore

console = Console()

_DEFAULT_DB_PATH = Path.home() / ".httpsession" / "sessions.db"


def _make_store(db_path: str | None) -> SQLiteStore:
    """Instantiate the SQLite store for ``db_path`` (or the default path)."""
    from httpsession.storage.sqlite import SQLiteStore

    try:
        return SQLiteStore(Path(db_path) if db_path else _DEFAULT_DB_PATH)
    except ImportError as exc:
        console.print(f"[red]{exc}[/red]")
        sys.exit(1)


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="httpsession")
@click.option(
    "--db",
    "db_path",
    default=None,
    envvar="HTTPSESSION_DB",
    show_envvar=True,
    help="Path to the SQLite session database.",
)
@click.pass_context
def cli(ctx: click.Context, db_path: str | None) -> None:
    """Cookie-based HTTP session maintenance"""
    ctx.ensure_object(dict)
    ctx.obj["db_path"] = db_path


@cli.command(name="version")
def version_command() -> None:
    """Show version information."""
    from httpsession import __version__

    console.print(f"[bold]httpsession[/bold] v{__version__}")


# ---------------------------------------------------------------------------
# Store commands
# ---------------------------------------------------------------------------


@cli.command(name="purge")
@click.pass_context
def purge_command(ctx: click.Context) -> None:
    """Delete every expired session record."""
    store = _make_store(ctx.obj["db_path"])

    async def run() -> tuple[int, int]:
        before = await store.count_all()
        await store.delete_expired()
        return before, await store.count_all()

    before, after = asyncio.run(run())
    console.print(f"[green]Purged {before - after} expired session(s).[/green] {after} remaining.")


@cli.command(name="count")
@click.pass_context
def count_command(ctx: click.Context) -> None:
    """Print the number of live (unexpired) session records."""
    store = _make_store(ctx.obj["db_path"])
    console.print(str(asyncio.run(store.count())))


@cli.command(name="show")
@click.argument("session_id")
@click.option("--json-output", is_flag=True, help="Print only the payload as JSON.")
@click.pass_context
def show_command(ctx: click.Context, session_id: str, json_output: bool) -> None:
    """Display the record stored under SESSION_ID."""
    store = _make_store(ctx.obj["db_path"])
    record = asyncio.run(store.load(session_id))
    if record is None:
        console.print(f"[red]Session not found:[/red] {session_id}")
        sys.exit(1)

    payload = record.data.decode("utf-8", errors="replace")
    try:
        parsed = json.loads(payload)
    except ValueError:
        parsed = None

    if json_output:
        if parsed is None:
            console.print("[red]Payload is not JSON.[/red]")
            sys.exit(1)
        console.print_json(json.dumps(parsed))
        return

    table = Table(title=f"Session {record.id[:8]}", show_lines=True)
    table.add_column("Field", style="bold cyan")
    table.add_column("Value")
    table.add_row("id", record.id)
    table.add_row("idle_deadline", record.idle_deadline.isoformat() if record.idle_deadline else "-")
    table.add_row("absolute_deadline", record.absolute_deadline.isoformat())
    table.add_row("size", f"{len(record.data)} bytes")
    console.print(table)

    body = json.dumps(parsed, indent=2) if parsed is not None else payload
    console.print(Panel(body, title="payload", expand=False))


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


if __name__ == "__main__":
    cli()
