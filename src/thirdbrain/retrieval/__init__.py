"""Similarity search and result reconstruction for Third Brain."""
from .distance import (
    DISTANCE_METRICS,
    cosine_distance,
    euclidean_distance,
    get_distance_metric,
    to_distance,
)
from .search import (
    SimilaritySearch,
    search,
)
from .ancestors import (
    AncestorPath,
    get_ancestor_ids,
    get_ancestor_items,
    get_context_text,
)
from .forest import (
    ResultForest,
    ResultPage,
    SubsetItem,
    SubsetPage,
)
from .embeddings import (
    EmbeddingClient,
    EmbeddingUpdateResult,
    find_stale_items,
    update_embeddings,
)

__all__ = [
    "DISTANCE_METRICS",
    "cosine_distance",
    "euclidean_distance",
    "get_distance_metric",
    "to_distance",
    "SimilaritySearch",
    "search",
    "AncestorPath",
    "get_ancestor_ids",
    "get_ancestor_items",
    "get_context_text",
    "ResultForest",
    "ResultPage",
    "SubsetItem",
    "SubsetPage",
    "EmbeddingClient",
    "EmbeddingUpdateResult",
    "find_stale_items",
    "update_embeddings",
]
