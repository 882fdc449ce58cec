"""Search and question-answering commands for Third Brain."""
import logging
import typer
from pathlib import Path
from typing import Optional
from ..config import get_thirdbrain_path, get_database_path, get_openai_api_key, load_config
from ..errors import ThirdBrainError
from ..llm import ChatClient
from ..prompting import generate_answer
from ..reporting.results import format_search_results
from ..retrieval.distance import get_distance_metric
from ..retrieval.embeddings import EmbeddingClient
from ..retrieval.forest import ResultForest
from ..retrieval.search import SimilaritySearch
from ..store import NoteStore

logger = logging.getLogger(__name__)


def _require_setup(base: Path, openai_api_key: Optional[str]) -> str:
    """Check the project is initialized and an API key is available."""
    if not get_thirdbrain_path(base).exists():
        typer.echo("Error: Third Brain not initialized. Run 'thirdbrain init' first.", err=True)
        raise typer.Exit(1)

    api_key = get_openai_api_key(openai_api_key)
    if not api_key:
        typer.echo("Error: OpenAI API key required. Set OPENAI_API_KEY in .env", err=True)
        raise typer.Exit(1)
    return api_key


def _find_results(
    store: NoteStore,
    query: str,
    top_k: int,
    metric: str,
    embedding_client: EmbeddingClient,
) -> ResultForest:
    """Embed the query, search the store and rebuild the outline around the hits."""
    distance_metric = get_distance_metric(metric)
    query_embedding = embedding_client.embed_text(query)
    hits = SimilaritySearch(query_embedding, top_k=top_k, distance_metric=distance_metric).execute(store)
    logger.debug("Search for %r returned %d hits", query, len(hits))
    return ResultForest().add_hits(store, hits)


def _write_output(text: str, output: Optional[Path]) -> None:
    if output is None:
        typer.echo(text, nl=False)
    else:
        output.write_text(text)
        typer.echo(f"Results written to {output}")


def search(
    query: str = typer.Argument(..., help="The text to search for"),
    base: Path = typer.Option(Path("."), "--base", "-b", help="Base path"),
    top_k: Optional[int] = typer.Option(None, "-k", help="Return the top K results (default: config search_top_k)"),
    metric: Optional[str] = typer.Option(None, "--metric", help="Distance metric: cosine or euclidean"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the Roam outline to this file"),
    openai_api_key: Optional[str] = typer.Option(None, "--openai-api-key", help="OpenAI API key (default: $OPENAI_API_KEY)"),
) -> None:
    """Search your notes by meaning.

    Prints the matching blocks as a Roam bulleted list, grouped by page with
    the most relevant page first. Each hit is annotated with its distance
    from the query; blocks above a hit are included for context.

    Example:
        thirdbrain search "spaced repetition"
        thirdbrain search "project ideas" -k 10 -o results.md
    """
    api_key = _require_setup(base, openai_api_key)
    config = load_config(get_thirdbrain_path(base))

    embedding_client = EmbeddingClient(
        api_key=api_key,
        model=config.embedding_model,
        max_retries=config.max_retries,
    )

    try:
        with NoteStore(get_database_path(base)) as store:
            results = _find_results(
                store,
                query,
                top_k if top_k is not None else config.search_top_k,
                metric or config.distance_metric,
                embedding_client,
            )
            text = format_search_results(query, results.get_subset_page_list(store))
    except ThirdBrainError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    _write_output(text, output)


def answer(
    question: str = typer.Argument(..., help="The question to answer"),
    base: Path = typer.Option(Path("."), "--base", "-b", help="Base path"),
    n_results: Optional[int] = typer.Option(
        None, "-n", help="Use the top N results to inform the answer (default: config answer_top_k)"
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the answer to this file"),
    openai_api_key: Optional[str] = typer.Option(None, "--openai-api-key", help="OpenAI API key (default: $OPENAI_API_KEY)"),
) -> None:
    """Answer a question from your notes.

    Finds the blocks closest to the question, hands them to the configured chat
    model and prints its answer in Roam markdown, with footnotes linking back
    to the blocks it used.

    Example:
        thirdbrain answer "What did I decide about the garden layout?"
    """
    api_key = _require_setup(base, openai_api_key)
    config = load_config(get_thirdbrain_path(base))

    embedding_client = EmbeddingClient(
        api_key=api_key,
        model=config.embedding_model,
        max_retries=config.max_retries,
    )
    chat_client = ChatClient(
        api_key=api_key,
        model=config.chat_model,
        max_retries=config.max_retries,
    )

    try:
        with NoteStore(get_database_path(base)) as store:
            results = _find_results(
                store,
                question,
                n_results if n_results is not None else config.answer_top_k,
                config.distance_metric,
                embedding_client,
            )
            reply = generate_answer(store, chat_client, results, question)
    except ThirdBrainError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    _write_output(f"Query: `{question}` #GPT\n{reply}\n", output)
