"""
Note store using SQLite.

Holds the imported outline (pages and their nested items) and one embedding
per item. This is the source of truth for:
- Page and item identity
- Sibling order within each page or parent item
- Item contents and timestamps
- Item vectors, with the exact text each was computed from

Every item is owned by exactly one of a page or a parent item, enforced by a
CHECK constraint, so the items form one tree per page. Deleting a page or item
removes its descendants and their embeddings.
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Sequence

import numpy as np

from ..errors import IntegrityViolation, NotFoundError
from ..models import ChildOf, Item, ItemEmbedding, Page, RootOf, Owner

logger = logging.getLogger(__name__)

# Vectors are stored as little-endian float32 blobs
VECTOR_DTYPE = np.dtype("<f4")

SCHEMA = """
    CREATE TABLE IF NOT EXISTS page (
        title TEXT NOT NULL PRIMARY KEY,
        create_time INTEGER,
        edit_time INTEGER NOT NULL
    );

    CREATE TABLE IF NOT EXISTS item (
        id TEXT NOT NULL PRIMARY KEY,
        parent_page_id TEXT NULL REFERENCES page(title) ON DELETE CASCADE,
        parent_item_id TEXT NULL REFERENCES item(id) ON DELETE CASCADE,
        order_in_parent INTEGER NOT NULL,
        contents TEXT NOT NULL,
        create_time INTEGER,
        edit_time INTEGER,
        CHECK ((parent_page_id IS NULL) != (parent_item_id IS NULL)),
        CHECK (order_in_parent >= 0)
    );

    CREATE INDEX IF NOT EXISTS idx_item_parent_page
        ON item(parent_page_id, order_in_parent);

    CREATE INDEX IF NOT EXISTS idx_item_parent_item
        ON item(parent_item_id, order_in_parent);

    CREATE TABLE IF NOT EXISTS item_embedding (
        item_id TEXT NOT NULL PRIMARY KEY REFERENCES item(id) ON DELETE CASCADE,
        embedded_text TEXT NOT NULL,
        embedding BLOB NOT NULL
    );
"""


def vector_to_blob(vector: Sequence[float] | np.ndarray) -> bytes:
    """Serialize a vector to little-endian float32 bytes."""
    return np.asarray(vector, dtype=VECTOR_DTYPE).tobytes()


def blob_to_vector(blob: bytes) -> np.ndarray:
    """Deserialize a vector written by vector_to_blob."""
    return np.frombuffer(blob, dtype=VECTOR_DTYPE)


def owner_from_columns(
    item_id: str,
    parent_page_id: Optional[str],
    parent_item_id: Optional[str],
) -> Owner:
    """Build an item's owner from its two nullable parent columns.

    Raises:
        IntegrityViolation: If both or neither column is set.
    """
    if parent_page_id is not None and parent_item_id is None:
        return RootOf(page_title=parent_page_id)
    if parent_item_id is not None and parent_page_id is None:
        return ChildOf(item_id=parent_item_id)
    raise IntegrityViolation(
        f"Item {item_id!r} must have exactly one owner, got "
        f"page={parent_page_id!r} item={parent_item_id!r}"
    )


def owner_to_columns(owner: Owner) -> tuple[Optional[str], Optional[str]]:
    """Inverse of owner_from_columns: (parent_page_id, parent_item_id)."""
    if isinstance(owner, RootOf):
        return owner.page_title, None
    return None, owner.item_id


class NoteStore:
    """
    SQLite-backed store for pages, items and item embeddings.

    Connections run in autocommit mode; group writes that must land together
    with transaction().
    """

    def __init__(self, db_path: Path):
        """
        Args:
            db_path: Path to SQLite database file (created if missing)
        """
        self._db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None
        self._in_transaction = False
        self._init_db()

    def _init_db(self) -> None:
        """Open the database, set pragmas and create the schema."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(
            str(self._db_path),
            isolation_level=None,
            check_same_thread=False,
        )
        self._conn.row_factory = sqlite3.Row

        self._conn.execute("PRAGMA foreign_keys = ON")
        self._conn.execute("PRAGMA journal_mode = WAL")
        self._conn.execute("PRAGMA temp_store = MEMORY")
        self._conn.executescript(SCHEMA)

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError(f"Note store {self._db_path} is closed")
        return self._conn

    def close(self) -> None:
        """Run a final optimize pass and close the connection."""
        if self._conn is None:
            return
        try:
            self._conn.execute("PRAGMA optimize")
        except sqlite3.Error as e:
            logger.debug("PRAGMA optimize failed: %s", e)
        self._conn.close()
        self._conn = None

    def __enter__(self) -> "NoteStore":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @contextmanager
    def transaction(self) -> Iterator["NoteStore"]:
        """All-or-nothing scope: commits on success, rolls back on any exception."""
        if self._in_transaction:
            # Already inside an outer transaction; it decides the outcome
            yield self
            return

        self.conn.execute("BEGIN")
        self._in_transaction = True
        try:
            yield self
        except BaseException:
            self.conn.execute("ROLLBACK")
            raise
        else:
            self.conn.execute("COMMIT")
        finally:
            self._in_transaction = False

    # -------------------------------------------------------------------------
    # Pages and Items
    # -------------------------------------------------------------------------

    def upsert_page(self, page: Page) -> None:
        """Insert a page, or update its timestamps if the title exists."""
        self.conn.execute("""
            INSERT INTO page (title, create_time, edit_time)
            VALUES (?, ?, ?)
            ON CONFLICT(title) DO UPDATE SET
                create_time = excluded.create_time,
                edit_time = excluded.edit_time
        """, (page.title, page.create_time, page.edit_time))

    def upsert_item(self, item: Item) -> None:
        """Insert an item, or update every column if the id exists."""
        parent_page_id, parent_item_id = owner_to_columns(item.owner)
        self.conn.execute("""
            INSERT INTO item (
                id, parent_page_id, parent_item_id, order_in_parent,
                contents, create_time, edit_time
            )
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                parent_page_id = excluded.parent_page_id,
                parent_item_id = excluded.parent_item_id,
                order_in_parent = excluded.order_in_parent,
                contents = excluded.contents,
                create_time = excluded.create_time,
                edit_time = excluded.edit_time
        """, (
            item.id, parent_page_id, parent_item_id, item.order_in_parent,
            item.contents, item.create_time, item.edit_time,
        ))

    def get_page(self, title: str) -> Page:
        """Fetch a page by title.

        Raises:
            NotFoundError: If no page has this title.
        """
        row = self.conn.execute(
            "SELECT title, create_time, edit_time FROM page WHERE title = ?",
            (title,)
        ).fetchone()
        if row is None:
            raise NotFoundError(f"Page not found: {title!r}")
        return Page(title=row["title"], create_time=row["create_time"], edit_time=row["edit_time"])

    def get_item(self, item_id: str) -> Item:
        """Fetch an item by id.

        Raises:
            NotFoundError: If no item has this id.
            IntegrityViolation: If the stored row has an invalid owner.
        """
        row = self.conn.execute("""
            SELECT id, parent_page_id, parent_item_id, order_in_parent,
                   contents, create_time, edit_time
            FROM item WHERE id = ?
        """, (item_id,)).fetchone()
        if row is None:
            raise NotFoundError(f"Item not found: {item_id!r}")

        return Item(
            id=row["id"],
            owner=owner_from_columns(row["id"], row["parent_page_id"], row["parent_item_id"]),
            order_in_parent=row["order_in_parent"],
            contents=row["contents"],
            create_time=row["create_time"],
            edit_time=row["edit_time"],
        )

    def get_page_children(self, title: str) -> list[str]:
        """Ids of a page's root items, in authoring order."""
        cursor = self.conn.execute("""
            SELECT id FROM item
            WHERE parent_page_id = ?
            ORDER BY order_in_parent ASC, id ASC
        """, (title,))
        return [row["id"] for row in cursor]

    def get_item_children(self, item_id: str) -> list[str]:
        """Ids of an item's child items, in authoring order."""
        cursor = self.conn.execute("""
            SELECT id FROM item
            WHERE parent_item_id = ?
            ORDER BY order_in_parent ASC, id ASC
        """, (item_id,))
        return [row["id"] for row in cursor]

    def get_subtree_ids(self, item_id: str) -> list[str]:
        """Ids of an item and all its descendants, parents before children.

        Raises:
            NotFoundError: If the item does not exist.
        """
        self.get_item(item_id)

        ordered: list[str] = []
        seen: set[str] = set()
        stack = [item_id]
        while stack:
            current = stack.pop()
            if current in seen:
                raise IntegrityViolation(f"Cycle detected below item {item_id!r} at {current!r}")
            seen.add(current)
            ordered.append(current)
            stack.extend(reversed(self.get_item_children(current)))
        return ordered

    def delete_item_and_descendants(self, item_id: str) -> int:
        """Delete an item, every descendant item, and all of their embeddings.

        Runs as one transaction and deletes explicitly, children first, so it
        does not depend on the connection's foreign key setting.

        Returns:
            Number of items deleted.

        Raises:
            NotFoundError: If the item does not exist.
        """
        with self.transaction():
            subtree = self.get_subtree_ids(item_id)
            for current in reversed(subtree):
                self.conn.execute("DELETE FROM item_embedding WHERE item_id = ?", (current,))
                self.conn.execute("DELETE FROM item WHERE id = ?", (current,))

        logger.debug("Deleted %d items below and including %s", len(subtree), item_id)
        return len(subtree)

    # -------------------------------------------------------------------------
    # Embeddings
    # -------------------------------------------------------------------------

    def upsert_embedding(
        self,
        item_id: str,
        embedded_text: str,
        vector: Sequence[float] | np.ndarray,
    ) -> None:
        """Store an item's vector, replacing any existing one."""
        self.conn.execute("""
            INSERT INTO item_embedding (item_id, embedded_text, embedding)
            VALUES (?, ?, ?)
            ON CONFLICT(item_id) DO UPDATE SET
                embedded_text = excluded.embedded_text,
                embedding = excluded.embedding
        """, (item_id, embedded_text, vector_to_blob(vector)))

    def get_embedding(self, item_id: str) -> Optional[ItemEmbedding]:
        """Get the embedding for an item, if it has one."""
        row = self.conn.execute(
            "SELECT item_id, embedded_text, embedding FROM item_embedding WHERE item_id = ?",
            (item_id,)
        ).fetchone()
        if row is None:
            return None
        return ItemEmbedding(
            item_id=row["item_id"],
            embedded_text=row["embedded_text"],
            embedding=blob_to_vector(row["embedding"]).tolist(),
        )

    def scan_all_vectors(self) -> Iterator[tuple[str, np.ndarray]]:
        """Yield (item_id, vector) for every stored embedding."""
        cursor = self.conn.execute("SELECT item_id, embedding FROM item_embedding")
        for row in cursor:
            yield row["item_id"], blob_to_vector(row["embedding"])

    def get_embedded_texts(self) -> dict[str, str]:
        """Map of item id to the text its current embedding was computed from."""
        cursor = self.conn.execute("SELECT item_id, embedded_text FROM item_embedding")
        return {row["item_id"]: row["embedded_text"] for row in cursor}

    def get_ids_missing_embeddings(self) -> list[str]:
        """Ids of items with non-empty contents and no embedding."""
        cursor = self.conn.execute("""
            SELECT id FROM item
            WHERE id NOT IN (SELECT item_id FROM item_embedding)
              AND length(contents) > 0
            ORDER BY id
        """)
        return [row["id"] for row in cursor]

    def delete_orphaned_embeddings(self) -> int:
        """Delete embeddings whose item no longer exists. Returns rows deleted."""
        cursor = self.conn.execute("""
            DELETE FROM item_embedding
            WHERE NOT EXISTS (SELECT 1 FROM item WHERE item.id = item_embedding.item_id)
        """)
        return cursor.rowcount

    def delete_all_embeddings(self) -> int:
        """Delete every embedding. Returns rows deleted."""
        return self.conn.execute("DELETE FROM item_embedding").rowcount

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------

    def get_stats(self) -> dict:
        """Return counts describing the store's contents."""
        def count(sql: str) -> int:
            return self.conn.execute(sql).fetchone()[0]

        row = self.conn.execute("SELECT embedding FROM item_embedding LIMIT 1").fetchone()
        dimensionality = len(blob_to_vector(row["embedding"])) if row else None

        return {
            "pages": count("SELECT COUNT(*) FROM page"),
            "items": count("SELECT COUNT(*) FROM item"),
            "embeddings": count("SELECT COUNT(*) FROM item_embedding"),
            "missing_embeddings": len(self.get_ids_missing_embeddings()),
            "dimensionality": dimensionality,
        }
