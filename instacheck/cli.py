"""Command-line interface for instacheck."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from instacheck import UsernameChecker, CheckerConfig, __version__
from instacheck.config import LogFormat
from instacheck.exceptions import ImportFileError
from instacheck.models.record import CheckStatus, PageStatus, UsernameRecord
from instacheck.models.stats import ProcessingStats

app = typer.Typer(
    name="instacheck",
    help="Bulk Instagram username page checker",
    add_completion=False,
)
console = Console()


def version_callback(value: bool):
    if value:
        console.print(f"instacheck version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """instacheck - bulk Instagram username page checker."""
    pass


@app.command()
def check(
    usernames: Optional[list[str]] = typer.Argument(
        None, help="Usernames, @handles or profile URLs to check"
    ),
    file: Optional[list[Path]] = typer.Option(
        None, "--file", "-f", help="Spreadsheet or CSV to import (repeatable)"
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Excel file to write results to"
    ),
    no_export: bool = typer.Option(
        False, "--no-export", help="Do not write an Excel file"
    ),
    delay: Optional[int] = typer.Option(
        None, "--delay", "-d", help="Delay between checks in ms"
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress the results table"
    ),
):
    """Check whether profile pages exist for the given usernames."""
    config = CheckerConfig(log_format=LogFormat.JSON if quiet else LogFormat.CONSOLE)
    if delay is not None:
        config.request_delay_ms = delay

    async def run():
        async with UsernameChecker(config) as checker:
            if usernames:
                checker.add_usernames(usernames)
            for path in file or []:
                try:
                    checker.add_file(path)
                except ImportFileError as e:
                    console.print(f"[red]✗[/red] {e}")
                    raise typer.Exit(1)

            if not checker.records:
                console.print("[yellow]No usernames to check[/yellow]")
                raise typer.Exit(1)

            console.print(f"Checking {len(checker.records)} usernames...")
            await checker.run()

            if not quiet:
                _print_results_table(checker.records)
            _print_stats(checker.stats)

            if not no_export:
                path = checker.export(output)
                console.print(f"[dim]Saved to {path}[/dim]")

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted[/yellow]")
        raise typer.Exit(130)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Bind port"),
):
    """Run the HTTP API."""
    import uvicorn

    config = CheckerConfig()
    uvicorn.run(
        "instacheck.api:app",
        host=host or config.api_host,
        port=port or config.api_port,
    )


def status_label(record: UsernameRecord) -> str:
    """Short rich-markup label for a record's combined status."""
    if record.check_status in (CheckStatus.IDLE, CheckStatus.PENDING):
        return "[dim]Pending[/dim]"
    if record.check_status == CheckStatus.PROCESSING:
        return "[blue]Checking[/blue]"
    if record.check_status == CheckStatus.FAILED:
        return "[red]Error[/red]"
    if record.page_status == PageStatus.OPEN:
        return "[red]Page Open (Taken)[/red]"
    if record.page_status == PageStatus.CLOSED:
        return "[green]Not Found (Available)[/green]"
    return "Unknown"


def _print_results_table(records: list[UsernameRecord]):
    """Print per-username results as a table."""
    table = Table(title="Results")
    table.add_column("Username")
    table.add_column("Status")
    table.add_column("Is Page Open?")
    table.add_column("Notes", overflow="fold", max_width=60)

    for record in records:
        open_text = record.is_page_open if record.is_page_open != "UNKNOWN" else "-"
        table.add_row(
            f"@{record.username}",
            status_label(record),
            open_text,
            record.notes or "-",
        )

    console.print(table)


def _print_stats(stats: ProcessingStats):
    console.print(
        f"\n[bold]Processed {stats.processed}/{stats.total}[/bold]  "
        f"[red]open {stats.open}[/red] · [green]closed {stats.closed}[/green] · "
        f"[yellow]errors {stats.errors}[/yellow]"
    )


if __name__ == "__main__":
    app()
