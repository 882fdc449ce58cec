"""Exact top-K similarity search over stored embeddings."""
import heapq
import logging
from typing import Iterable, Iterator

import numpy as np

from ..errors import EmptyResultError, InvalidInputError
from ..store import NoteStore
from .distance import DistanceMetric, cosine_distance

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 32

# (distance, item_id), compared as a tuple so ties break on item id
SearchHit = tuple[float, str]


def search(
    query: np.ndarray,
    vectors: Iterable[tuple[str, np.ndarray]],
    top_k: int,
    distance_metric: DistanceMetric = cosine_distance,
) -> list[SearchHit]:
    """Return the top_k (distance, item_id) pairs nearest to the query.

    Makes a single pass over the vectors, keeping at most top_k candidates in
    a bounded heap (heapq.nsmallest evicts the current worst whenever a better
    candidate arrives). The result is sorted ascending by distance with ties
    broken by item id, so it does not depend on the order of the vectors.

    Args:
        query: Query vector.
        vectors: (item_id, vector) pairs, e.g. NoteStore.scan_all_vectors().
        top_k: Number of results to keep; at least 1.
        distance_metric: Function computing the distance between two vectors.

    Raises:
        InvalidInputError: If top_k < 1 or a vector's dimensionality differs
            from the query's.
        EmptyResultError: If there are no vectors at all.
    """
    if top_k < 1:
        raise InvalidInputError(f"top_k must be at least 1, got {top_k}")

    query = np.asarray(query)
    if query.ndim != 1:
        raise InvalidInputError(f"Query must be a 1-dimensional vector, got shape {query.shape}")

    scanned = 0

    def scored() -> Iterator[SearchHit]:
        nonlocal scanned
        for item_id, vector in vectors:
            if vector.shape != query.shape:
                raise InvalidInputError(
                    f"Vector for item {item_id!r} has dimensionality {vector.shape[0]}, "
                    f"query has {query.shape[0]}"
                )
            scanned += 1
            yield distance_metric(query, vector), item_id

    hits = heapq.nsmallest(top_k, scored())

    if scanned == 0:
        raise EmptyResultError("No item embeddings found in database")

    logger.debug("Scanned %d vectors, kept %d", scanned, len(hits))
    return hits


class SimilaritySearch:
    """A configured similarity query against a NoteStore."""

    def __init__(
        self,
        query: np.ndarray,
        top_k: int = DEFAULT_TOP_K,
        distance_metric: DistanceMetric = cosine_distance,
    ):
        if top_k < 1:
            raise InvalidInputError(f"top_k must be at least 1, got {top_k}")
        self.query = np.asarray(query, dtype=np.float32)
        self.top_k = top_k
        self.distance_metric = distance_metric

    def execute(self, store: NoteStore) -> list[SearchHit]:
        """Run the search over every vector in the store."""
        return search(self.query, store.scan_all_vectors(), self.top_k, self.distance_metric)
