"""SQLite storage for the imported outline and its embeddings."""
from .database import (
    NoteStore,
    vector_to_blob,
    blob_to_vector,
    owner_from_columns,
    owner_to_columns,
)

__all__ = [
    "NoteStore",
    "vector_to_blob",
    "blob_to_vector",
    "owner_from_columns",
    "owner_to_columns",
]
