"""Configuration management commands for Third Brain."""
import json
import typer
from pathlib import Path
from pydantic import ValidationError
from ..config import get_thirdbrain_path, load_config, CONFIG_FILE
from ..storage import write_json
from ..models import ThirdBrainConfig

app = typer.Typer()


def parse_value(value: str):
    """Parse a command-line value: true/false, numbers, otherwise the raw string."""
    if value.lower() == "true":
        return True
    if value.lower() == "false":
        return False
    try:
        return json.loads(value)
    except ValueError:
        return value


@app.command("show")
def config_show(
    base: Path = typer.Option(Path("."), "--base", "-b", help="Base path"),
    plain: bool = typer.Option(False, "--plain", "-p", help="Plain text output"),
) -> None:
    """Show current configuration.

    Displays all configuration values and marks which are defaults vs custom.

    Example:
        thirdbrain config show
    """
    from rich.console import Console
    from rich.table import Table
    from rich import box

    thirdbrain_path = get_thirdbrain_path(base)
    console = Console(force_terminal=not plain, no_color=plain)

    if not thirdbrain_path.exists():
        console.print("[red]Error:[/red] Third Brain not initialized. Run 'thirdbrain init' first.")
        raise typer.Exit(1)

    config = load_config(thirdbrain_path)
    defaults = ThirdBrainConfig()

    console.print(f"[dim]Config file: {thirdbrain_path / CONFIG_FILE}[/dim]")
    console.print()

    table = Table(box=box.ROUNDED, show_header=True, header_style="bold")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_column("Status", justify="center")

    for name in ThirdBrainConfig.model_fields:
        value = getattr(config, name)
        if value == getattr(defaults, name):
            status = "[dim]default[/dim]"
        else:
            status = "[green]custom[/green]"
        table.add_row(name, str(value), status)

    console.print(table)


@app.command("reset")
def config_reset(
    base: Path = typer.Option(Path("."), "--base", "-b", help="Base path"),
) -> None:
    """Reset configuration to defaults.

    This regenerates config.json with the latest default values.
    """
    thirdbrain_path = get_thirdbrain_path(base)

    if not thirdbrain_path.exists():
        typer.echo("Error: Third Brain not initialized. Run 'thirdbrain init' first.", err=True)
        raise typer.Exit(1)

    write_json(thirdbrain_path / CONFIG_FILE, ThirdBrainConfig())
    typer.echo("Configuration reset to defaults.")


@app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Config key to set"),
    value: str = typer.Argument(..., help="Value to set"),
    base: Path = typer.Option(Path("."), "--base", "-b", help="Base path"),
) -> None:
    """Set a configuration value.

    Examples:
        thirdbrain config set request_concurrency 8
        thirdbrain config set chat_model gpt-4o
        thirdbrain config set command_logging false
    """
    thirdbrain_path = get_thirdbrain_path(base)

    if not thirdbrain_path.exists():
        typer.echo("Error: Third Brain not initialized. Run 'thirdbrain init' first.", err=True)
        raise typer.Exit(1)

    if key not in ThirdBrainConfig.model_fields:
        available = ", ".join(ThirdBrainConfig.model_fields)
        typer.echo(f"Error: Unknown config key '{key}'. Available: {available}", err=True)
        raise typer.Exit(1)

    parsed_value = parse_value(value)
    # Model names are strings even when they look like numbers
    if ThirdBrainConfig.model_fields[key].annotation is str:
        parsed_value = value

    data = load_config(thirdbrain_path).model_dump()
    data[key] = parsed_value
    try:
        config = ThirdBrainConfig.model_validate(data)
    except ValidationError as e:
        typer.echo(f"Error: Invalid value for '{key}': {e.errors()[0]['msg']}", err=True)
        raise typer.Exit(1)

    write_json(thirdbrain_path / CONFIG_FILE, config)

    typer.echo(f"Set {key} = {getattr(config, key)}")
