"""Reporting commands for Third Brain."""
import typer
from pathlib import Path
from ..config import get_thirdbrain_path


def status(
    base: Path = typer.Option(Path("."), "--base", "-b", help="Base path"),
    plain: bool = typer.Option(False, "--plain", "-p", help="Plain text output (no colors)"),
) -> None:
    """Show note and embedding counts with the active settings."""
    from ..reporting.status import StatusReporter

    thirdbrain_path = get_thirdbrain_path(base)

    if not thirdbrain_path.exists():
        typer.echo("Error: Third Brain not initialized. Run 'thirdbrain init' first.", err=True)
        raise typer.Exit(1)

    reporter = StatusReporter(thirdbrain_path, base)
    reporter.gather()

    if plain:
        typer.echo(reporter.format_plain())
    else:
        reporter.format_rich()
