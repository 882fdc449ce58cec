"""Status reporting for Third Brain - store dashboard data and display."""
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..config import load_config, get_database_path
from ..store import NoteStore


@dataclass
class StatusData:
    """Data container for store status."""
    # Outline stats
    page_count: int = 0
    item_count: int = 0

    # Embedding stats
    embedding_count: int = 0
    missing_embeddings: int = 0
    dimensionality: Optional[int] = None

    # Config
    version: str = "unknown"
    embedding_model: str = "not set"
    chat_model: str = "not set"
    distance_metric: str = "cosine"


class StatusReporter:
    """Gathers and reports store status data."""

    def __init__(self, thirdbrain_path: Path, base_path: Path):
        self.thirdbrain_path = thirdbrain_path
        self.base_path = base_path
        self._data: StatusData | None = None

    def gather(self) -> StatusData:
        """Gather all status data from the .thirdbrain directory."""
        data = StatusData()

        config = load_config(self.thirdbrain_path)
        data.version = config.version
        data.embedding_model = config.embedding_model
        data.chat_model = config.chat_model
        data.distance_metric = config.distance_metric

        with NoteStore(get_database_path(self.base_path)) as store:
            stats = store.get_stats()

        data.page_count = stats["pages"]
        data.item_count = stats["items"]
        data.embedding_count = stats["embeddings"]
        data.missing_embeddings = stats["missing_embeddings"]
        data.dimensionality = stats["dimensionality"]

        self._data = data
        return data

    @property
    def data(self) -> StatusData:
        """Get status data, gathering if not already done."""
        if self._data is None:
            self.gather()
        return self._data  # type: ignore

    def format_plain(self) -> str:
        """Format status as plain text."""
        d = self.data
        lines = [
            "THIRD BRAIN STATUS",
            "=" * 60,
            "",
            "Notes",
            "-" * 30,
            f"  Pages:             {d.page_count}",
            f"  Items:             {d.item_count}",
            "",
            "Embeddings",
            "-" * 30,
            f"  Embedded items:    {d.embedding_count}",
            f"  Missing:           {d.missing_embeddings}",
            f"  Dimensions:        {d.dimensionality if d.dimensionality is not None else '(none)'}",
            "",
            "Configuration",
            "-" * 30,
            f"  Version:           {d.version}",
            f"  Embedding model:   {d.embedding_model}",
            f"  Chat model:        {d.chat_model}",
            f"  Distance metric:   {d.distance_metric}",
        ]

        actions = self.get_suggested_actions()
        if actions:
            lines.extend(["", "Suggested Actions:"])
            for action in actions:
                lines.append(f"  {action}")

        return "\n".join(lines)

    def format_rich(self) -> None:
        """Print status with rich formatting."""
        from rich.console import Console
        from rich.table import Table
        from rich.panel import Panel
        from rich import box

        d = self.data
        console = Console()

        console.print()
        console.print(Panel.fit("[bold blue]THIRD BRAIN STATUS[/bold blue]", box=box.DOUBLE))
        console.print()

        notes_table = Table(title="Notes", box=box.ROUNDED, show_header=False)
        notes_table.add_column("Metric", style="cyan")
        notes_table.add_column("Value", justify="right")
        notes_table.add_row("Pages", str(d.page_count))
        notes_table.add_row("Items", str(d.item_count))
        console.print(notes_table)
        console.print()

        embeddings_table = Table(title="Embeddings", box=box.ROUNDED, show_header=False)
        embeddings_table.add_column("Metric", style="cyan")
        embeddings_table.add_column("Value", justify="right")
        embeddings_table.add_row("Embedded items", str(d.embedding_count))
        if d.missing_embeddings:
            embeddings_table.add_row("Missing", f"[yellow]{d.missing_embeddings}[/yellow]")
        else:
            embeddings_table.add_row("Missing", "[green]0[/green]")
        embeddings_table.add_row(
            "Dimensions",
            str(d.dimensionality) if d.dimensionality is not None else "[dim](none)[/dim]",
        )
        console.print(embeddings_table)
        console.print()

        config_table = Table(title="Configuration", box=box.ROUNDED, show_header=False)
        config_table.add_column("Setting", style="cyan")
        config_table.add_column("Value", justify="right")
        config_table.add_row("Version", d.version)
        config_table.add_row("Embedding model", d.embedding_model)
        config_table.add_row("Chat model", d.chat_model)
        config_table.add_row("Distance metric", d.distance_metric)
        console.print(config_table)
        console.print()

        actions = self.get_suggested_actions()
        if actions:
            console.print("[bold]Suggested Actions:[/bold]")
            for action in actions:
                console.print(f"  [yellow]{action}[/yellow]")

    def get_suggested_actions(self) -> list[str]:
        """Get list of suggested actions based on current status."""
        d = self.data
        actions: list[str] = []

        if d.page_count == 0:
            actions.append("thirdbrain import <export.json> - load your Roam graph")
        if d.missing_embeddings > 0:
            actions.append("thirdbrain update-embeddings - embed new items")

        return actions
