"""Command log inspection for Third Brain."""

import typer
from pathlib import Path
from rich.console import Console

from ..logging import parse_log_file, get_logs_path, COMMAND_LOG_FILE

app = typer.Typer(help="Inspect the Third Brain command log.")
console = Console()


@app.command("show")
def logs_show(
    lines: int = typer.Option(50, "--lines", "-n", help="Number of recent lines to show"),
    base: Path = typer.Option(Path("."), "--base", "-b", help="Base path"),
):
    """Show recent log entries."""
    entries = parse_log_file(base)

    if not entries:
        console.print("[yellow]No log entries found.[/yellow]")
        return

    for entry in entries[-lines:]:
        ts = entry["timestamp"][:19]  # Trim microseconds
        args = entry["args"][:60] + "..." if len(entry["args"]) > 60 else entry["args"]
        if entry["command"] in ("search", "answer"):
            console.print(f"[bold blue]{ts}[/] [green]{entry['command']}[/] {args}")
        else:
            console.print(f"[dim]{ts}[/] {entry['command']} {args}")


@app.command("clear")
def logs_clear(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
    base: Path = typer.Option(Path("."), "--base", "-b", help="Base path"),
):
    """Clear the command log file."""
    log_file = get_logs_path(base) / COMMAND_LOG_FILE

    if not log_file.exists():
        console.print("[yellow]No log file to clear.[/yellow]")
        return

    if not force:
        confirm = typer.confirm("Clear all log entries?")
        if not confirm:
            raise typer.Abort()

    log_file.unlink()
    console.print("[green]Log file cleared.[/green]")
