"""Third Brain CLI - semantic search and question answering over a Roam graph."""

import typer

app = typer.Typer(
    name="thirdbrain",
    help="Semantic search and question answering over your RoamResearch notes",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging on stderr"),
) -> None:
    """Third Brain - search your notes by meaning."""
    from .logging import configure_logging, log_from_cli

    configure_logging(verbose)

    # Log command invocation for development tracking
    try:
        log_from_cli()
    except Exception:
        # Don't let logging failures break the CLI
        pass


# Import and register command modules
from .commands import init as init_cmd
from .commands import notes as notes_cmd
from .commands import embeddings as embeddings_cmd
from .commands import search as search_cmd
from .commands import report as report_cmd
from .commands import config_cmd
from .commands import logs as logs_cmd

# Register init as a direct command (not a subcommand)
app.command(name="init")(init_cmd.init)

# Register note maintenance commands at top level
app.command(name="import")(notes_cmd.import_notes)
app.command(name="exclude")(notes_cmd.exclude)
app.command(name="update-embeddings")(embeddings_cmd.update_embeddings_cmd)

# Register query commands at top level
app.command(name="search")(search_cmd.search)
app.command(name="answer")(search_cmd.answer)

app.command(name="status")(report_cmd.status)

# Register config commands as a subcommand group
app.add_typer(config_cmd.app, name="config")

# Register logs commands as a subcommand group
app.add_typer(logs_cmd.app, name="logs")


if __name__ == "__main__":
    app()
