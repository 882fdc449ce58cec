"""Embedding maintenance commands for Third Brain."""
import typer
from pathlib import Path
from typing import Optional
from ..config import get_thirdbrain_path, get_database_path, get_openai_api_key, load_config
from ..errors import ThirdBrainError
from ..retrieval.embeddings import EmbeddingClient, update_embeddings
from ..store import NoteStore


def update_embeddings_cmd(
    base: Path = typer.Option(Path("."), "--base", "-b", help="Base path"),
    reset: bool = typer.Option(False, "--reset", help="Delete all existing embeddings and re-generate"),
    refresh_stale: bool = typer.Option(
        True, "--refresh-stale/--no-refresh-stale", help="Re-embed blocks whose context changed since embedding"
    ),
    openai_api_key: Optional[str] = typer.Option(None, "--openai-api-key", help="OpenAI API key (default: $OPENAI_API_KEY)"),
) -> None:
    """Embed every block that doesn't have an up-to-date embedding.

    Safe to interrupt and re-run: each finished batch is saved as it
    arrives, and the next run only embeds what is still missing.

    Example:
        thirdbrain update-embeddings
        thirdbrain update-embeddings --reset
    """
    thirdbrain_path = get_thirdbrain_path(base)
    if not thirdbrain_path.exists():
        typer.echo("Error: Third Brain not initialized. Run 'thirdbrain init' first.", err=True)
        raise typer.Exit(1)

    api_key = get_openai_api_key(openai_api_key)
    if not api_key:
        typer.echo("Error: OpenAI API key required. Set OPENAI_API_KEY in .env", err=True)
        raise typer.Exit(1)

    config = load_config(thirdbrain_path)
    client = EmbeddingClient(
        api_key=api_key,
        model=config.embedding_model,
        max_retries=config.max_retries,
    )

    try:
        with NoteStore(get_database_path(base)) as store:
            result = update_embeddings(
                store,
                client,
                batch_size=config.batch_size,
                request_concurrency=config.request_concurrency,
                reset=reset,
                refresh_stale=refresh_stale,
            )
    except ThirdBrainError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Embedded {result.embeddings_updated}/{result.total_to_embed} blocks")

    if not result.ok:
        typer.echo(f"Error: {len(result.failed_batches)} batches failed:", err=True)
        for message in result.failed_batches:
            typer.echo(f"  - {message}", err=True)
        typer.echo("Re-run 'thirdbrain update-embeddings' to retry them.", err=True)
        raise typer.Exit(1)
