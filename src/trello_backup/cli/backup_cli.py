"""
Command-line interface for backup operations.

This module provides the CLI for backing up a Trello account using Typer,
with a startup banner, progress lines, and a summary of the run.
"""

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.panel import Panel

from ..backup.authenticator import USAGE, create_authenticator
from ..backup.manager import TrelloBackupManager
from ..config import get_backup_config
from ..exceptions import UsageError

ATLASSIAN_NOTE = "Note: If you're using an Atlassian account, you must use the token cookie."

backup_app = typer.Typer(
    name="trello-backup",
    help="Back up all open Trello boards with their attachments and backgrounds.",
    add_completion=False
)

# Rich consoles for pretty output
console = Console()
error_console = Console(stderr=True)


def _print_usage() -> None:
    console.print(escape(USAGE), highlight=False)
    console.print(ATLASSIAN_NOTE, highlight=False)


# Passwords and tokens may start with a dash; without short aliases such
# values are passed through to the credentials argument untouched.
@backup_app.command(context_settings={"ignore_unknown_options": True})
def main(
    credentials: Optional[List[str]] = typer.Argument(
        None,
        metavar="(TOKEN_COOKIE | USERNAME PASSWORD [TOTP_SECRET])",
        help="Either the value of the 'token' cookie, or username, password and optional TOTP secret",
        show_default=False
    ),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output-dir",
        help="Directory to store backup files (default: current directory)"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable verbose logging"
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug logging"
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Log file path (default: no file logging)"
    )
):
    """
    Back up a Trello account.

    Every open board is saved as a timestamped JSON export, and the
    attachments and backgrounds it references are downloaded once.
    """
    try:
        authenticator = create_authenticator(credentials or [])
    except UsageError:
        _print_usage()
        raise typer.Exit(1)

    console.print(Panel.fit(
        "[bold blue]Trello Backup[/bold blue]\n"
        "[dim]Backing up your Trello boards...[/dim]",
        border_style="blue"
    ))

    try:
        config_overrides = {
            "verbose": verbose,
            "debug": debug,
        }

        if output_dir:
            config_overrides["output_dir"] = output_dir

        if log_file:
            config_overrides["log_file"] = str(log_file)

        config = get_backup_config(**config_overrides)
        config.output_dir.mkdir(parents=True, exist_ok=True)

        console.print(f"[dim]Login method:[/dim] {authenticator.description}")
        console.print(f"[dim]Output directory:[/dim] {config.output_dir}")
        console.print()

        backup_manager = TrelloBackupManager(config, authenticator)
        try:
            stats = backup_manager.start_backup()
        finally:
            backup_manager.api_client.close()

        console.print()
        console.print("[green]✓[/green] Successfully backed up Trello data")
        _display_backup_stats(stats)

    except KeyboardInterrupt:
        error_console.print("\n[yellow]Backup cancelled by user[/yellow]")
        raise typer.Exit(1)

    except Exception as e:
        error_console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False)
        if debug:
            error_console.print_exception()
        raise typer.Exit(1)


def _display_backup_stats(stats: dict):
    """Display backup statistics in a formatted table."""

    table = Table(title="Backup Statistics", show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Account", str(stats.get("username", "")))
    table.add_row("Boards Found", str(stats.get("boards_found", 0)))
    table.add_row("Boards Backed Up", str(stats.get("boards_backed_up", 0)))
    table.add_row("Closed Boards Skipped", str(stats.get("boards_skipped", 0)))
    table.add_row("Assets Downloaded", str(stats.get("assets_downloaded", 0)))
    table.add_row("Assets Already Present", str(stats.get("assets_skipped", 0)))

    api_stats = stats.get("api_stats", {})
    table.add_row("HTTP Requests", str(api_stats.get("total_requests", 0)))
    table.add_row("HTTP Errors", str(api_stats.get("total_errors", 0)))

    console.print()
    console.print(table)


if __name__ == "__main__":
    backup_app()
