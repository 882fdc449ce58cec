"""Initialize Third Brain in a directory."""

import typer
from pathlib import Path
from ..config import get_thirdbrain_path, get_database_path, CONFIG_FILE
from ..logging import THIRDBRAIN_LOGS_DIR
from ..models import ThirdBrainConfig
from ..storage import write_json
from ..store import NoteStore


def _ensure_gitignore(base_path: Path) -> bool:
    """Add .thirdbrain/ and .thirdbrain-logs/ to .gitignore if not already present.

    Returns True if the file was modified.
    """
    gitignore = base_path / ".gitignore"
    entries_needed = [".thirdbrain/", f"{THIRDBRAIN_LOGS_DIR}/"]

    existing_lines = []
    if gitignore.exists():
        existing_lines = gitignore.read_text().splitlines()

    # Check which entries are missing
    missing = [e for e in entries_needed if e not in existing_lines]
    if not missing:
        return False

    with open(gitignore, "a") as f:
        # Add a newline separator if file doesn't end with one
        if existing_lines and existing_lines[-1].strip():
            f.write("\n")
        if not existing_lines:
            f.write("# Third Brain notes database (local, not committed)\n")
        for entry in missing:
            f.write(f"{entry}\n")

    return True


def init(
    path: Path = typer.Argument(
        Path("."),
        help="Path to initialize Third Brain in"
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Reinitialize an existing .thirdbrain directory (keeps imported notes)"
    ),
) -> None:
    """Initialize Third Brain.

    Creates .thirdbrain/ with a default config.json and an empty notes
    database, and adds the data and log directories to .gitignore.

    Example:
        thirdbrain init
        thirdbrain init ~/notes --force
    """
    thirdbrain_path = get_thirdbrain_path(path)

    if thirdbrain_path.exists() and not force:
        typer.echo(f"Third Brain already initialized at {thirdbrain_path}")
        typer.echo("Use --force to reinitialize.")
        raise typer.Exit(1)

    thirdbrain_path.mkdir(parents=True, exist_ok=True)
    write_json(thirdbrain_path / CONFIG_FILE, ThirdBrainConfig())

    # Creates the schema
    with NoteStore(get_database_path(path)):
        pass

    if _ensure_gitignore(path):
        typer.echo("Updated .gitignore")

    typer.echo(f"Initialized Third Brain in {thirdbrain_path}")
    typer.echo("")
    typer.echo("Next steps:")
    typer.echo("  thirdbrain import <roam-export.json>")
    typer.echo("  thirdbrain update-embeddings")
    typer.echo("  thirdbrain search \"your query\"")
