"""Embedding provider client and the embedding update job."""
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

import numpy as np
import openai

from ..errors import ExternalProviderError, InvalidInputError, ThirdBrainError
from ..store import NoteStore
from .ancestors import get_context_text

logger = logging.getLogger(__name__)

DEFAULT_EMBEDDING_MODEL = "text-embedding-ada-002"


# ============================================================
# OpenAI Embedding API
# ============================================================

class EmbeddingClient:
    """Turns batches of text into vectors with the OpenAI embeddings API.

    Rate limits, timeouts and 5xx responses are retried by the OpenAI SDK
    with exponential backoff, up to max_retries times. Whatever still fails
    is raised as ExternalProviderError.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_EMBEDDING_MODEL,
        max_retries: int = 6,
        client: Optional[Any] = None,
    ):
        self.model = model
        self._client = client or openai.OpenAI(api_key=api_key, max_retries=max_retries)

    def embed_batch(self, texts: Sequence[str]) -> list[np.ndarray]:
        """Embed a batch of texts; the i-th vector belongs to the i-th text.

        Raises:
            InvalidInputError: If any text is empty.
            ExternalProviderError: If the request fails or the response is malformed.
        """
        if any(not text for text in texts):
            raise InvalidInputError("Cannot create embedding for empty string.")
        if not texts:
            return []

        try:
            response = self._client.embeddings.create(input=list(texts), model=self.model)
        except openai.OpenAIError as e:
            logger.error(
                "Embedding request failed (%s): batch size=%d, error=%s",
                type(e).__name__, len(texts), e,
            )
            raise ExternalProviderError(f"Failed to create embeddings: {e}") from e

        records = sorted(response.data, key=lambda record: record.index)
        if len(records) != len(texts):
            raise ExternalProviderError(
                f"Embedding response has {len(records)} vectors for {len(texts)} texts"
            )

        return [np.asarray(record.embedding, dtype=np.float32) for record in records]

    def embed_text(self, text: str) -> np.ndarray:
        """Embed a single text."""
        return self.embed_batch([text])[0]


# ============================================================
# Embedding update job
# ============================================================

@dataclass
class EmbeddingUpdateResult:
    """Outcome of an update_embeddings run."""
    total_to_embed: int = 0
    embeddings_updated: int = 0
    failed_batches: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed_batches


def find_stale_items(store: NoteStore) -> list[str]:
    """Ids of embedded items whose context text has changed since embedding."""
    stale = []
    for item_id, embedded_text in store.get_embedded_texts().items():
        if get_context_text(store, item_id) != embedded_text:
            stale.append(item_id)
    return sorted(stale)


def update_embeddings(
    store: NoteStore,
    client: EmbeddingClient,
    batch_size: int = 512,
    request_concurrency: int = 4,
    reset: bool = False,
    refresh_stale: bool = False,
) -> EmbeddingUpdateResult:
    """Embed every item that lacks an embedding.

    Batches are sent to the provider with at most request_concurrency in
    flight. Each batch is written to the store as soon as it completes, in
    whatever order batches finish, so an interrupted run loses only the
    batches in flight and the next run picks up the items still missing.

    Args:
        store: Note store to read items from and write embeddings to.
        client: Embedding provider.
        batch_size: Texts per provider request.
        request_concurrency: Maximum simultaneous provider requests.
        reset: Delete all existing embeddings first.
        refresh_stale: Also re-embed items whose context text changed.

    Returns:
        Counts of work done, and an error message per failed batch.
    """
    if batch_size < 1:
        raise InvalidInputError(f"batch_size must be at least 1, got {batch_size}")
    if request_concurrency < 1:
        raise InvalidInputError(f"request_concurrency must be at least 1, got {request_concurrency}")

    if reset:
        deleted = store.delete_all_embeddings()
        logger.info("Deleted %d existing embeddings", deleted)

    ids_to_embed = store.get_ids_missing_embeddings()
    if refresh_stale:
        stale = find_stale_items(store)
        logger.info("Found %d stale embeddings", len(stale))
        ids_to_embed = sorted(set(ids_to_embed) | set(stale))

    items_to_embed = [(item_id, get_context_text(store, item_id)) for item_id in ids_to_embed]
    result = EmbeddingUpdateResult(total_to_embed=len(items_to_embed))
    if not items_to_embed:
        logger.info("All items are embedded")
        return result

    batches = [
        items_to_embed[start:start + batch_size]
        for start in range(0, len(items_to_embed), batch_size)
    ]
    logger.info("Embedding %d items in %d batches", len(items_to_embed), len(batches))

    with ThreadPoolExecutor(max_workers=request_concurrency) as executor:
        future_to_batch = {
            executor.submit(client.embed_batch, [text for _, text in batch]): batch
            for batch in batches
        }

        # Store access stays on this thread; workers only call the provider
        for future in as_completed(future_to_batch):
            batch = future_to_batch[future]
            try:
                vectors = future.result()
            except ThirdBrainError as e:
                message = f"Batch starting at item {batch[0][0]} ({len(batch)} items): {e}"
                logger.error("Failed to embed batch: %s", message)
                result.failed_batches.append(message)
                continue

            with store.transaction():
                for (item_id, text), vector in zip(batch, vectors):
                    store.upsert_embedding(item_id, text, vector)
            result.embeddings_updated += len(batch)

            logger.info(
                "Updated batch: embeddings_updated=%d total_to_embed=%d",
                result.embeddings_updated, result.total_to_embed,
            )

    return result
