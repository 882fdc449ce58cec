"""Note import and pruning commands for Third Brain."""
import typer
from pathlib import Path
from pydantic import ValidationError
from ..config import get_thirdbrain_path, get_database_path
from ..errors import ThirdBrainError
from ..importer import load_export, import_export
from ..store import NoteStore


def import_notes(
    export_file: Path = typer.Argument(..., help="Path to the RoamResearch JSON export file"),
    base: Path = typer.Option(Path("."), "--base", "-b", help="Base path"),
) -> None:
    """Import a RoamResearch JSON export.

    Pages and blocks are inserted or updated in a single transaction; if
    anything fails, nothing from the export is kept. Embeddings of blocks
    that no longer exist are removed afterwards.

    Example:
        thirdbrain import ~/Downloads/Roam-Export/my-graph.json
    """
    thirdbrain_path = get_thirdbrain_path(base)
    if not thirdbrain_path.exists():
        typer.echo("Error: Third Brain not initialized. Run 'thirdbrain init' first.", err=True)
        raise typer.Exit(1)

    if not export_file.exists():
        typer.echo(f"Error: Export file not found: {export_file}", err=True)
        raise typer.Exit(1)

    try:
        export = load_export(export_file)
    except ValidationError as e:
        typer.echo(f"Error: Failed to parse Roam export file: {e}", err=True)
        raise typer.Exit(1)

    try:
        with NoteStore(get_database_path(base)) as store:
            result = import_export(store, export)
    except ThirdBrainError as e:
        typer.echo(f"Error: Failed to load pages to database: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Imported {result.pages} pages ({result.items} items)")
    if result.orphaned_embeddings_deleted:
        typer.echo(f"Deleted {result.orphaned_embeddings_deleted} orphaned embeddings")


def exclude(
    item_id: str = typer.Argument(..., help="Block uid to remove, with everything nested under it"),
    base: Path = typer.Option(Path("."), "--base", "-b", help="Base path"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
) -> None:
    """Remove a block and its whole subtree from the notes database.

    Deletes the block, every block nested under it, and their embeddings,
    so they no longer appear in search results. Re-importing an export that
    still contains the block brings it back.

    Example:
        thirdbrain exclude a1B2c3D4e
    """
    thirdbrain_path = get_thirdbrain_path(base)
    if not thirdbrain_path.exists():
        typer.echo("Error: Third Brain not initialized. Run 'thirdbrain init' first.", err=True)
        raise typer.Exit(1)

    try:
        with NoteStore(get_database_path(base)) as store:
            subtree = store.get_subtree_ids(item_id)
            if not yes:
                confirm = typer.confirm(f"Delete {len(subtree)} blocks under (({item_id}))?")
                if not confirm:
                    raise typer.Abort()
            deleted = store.delete_item_and_descendants(item_id)
    except ThirdBrainError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Deleted {deleted} blocks")
