"""Third Brain - Semantic search and question answering over a Roam graph.

Third Brain imports a RoamResearch export into a local SQLite database,
embeds every block with the context of its ancestors, and answers queries by
returning the most similar blocks rendered as a pruned outline of the pages
they live on.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
