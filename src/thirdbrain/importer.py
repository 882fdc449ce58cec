"""Import a RoamResearch JSON export into the note store."""
import logging
from dataclasses import dataclass
from pathlib import Path

from .config import IMPORT_LOG_INTERVAL
from .models import ChildOf, ExportItem, ExportPage, Item, Owner, Page, RoamExport, RootOf
from .storage import read_json_typed
from .store import NoteStore

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    """Counts from one import run."""
    pages: int
    items: int
    orphaned_embeddings_deleted: int


def load_export(path: Path) -> RoamExport:
    """Parse a RoamResearch JSON export file."""
    return read_json_typed(path, RoamExport)


def insert_page(store: NoteStore, page: ExportPage) -> int:
    """Upsert a page and its whole outline. Returns the number of items written.

    Parents are always written before their children.
    """
    store.upsert_page(Page(
        title=page.title,
        create_time=page.create_time,
        edit_time=page.edit_time,
    ))

    item_count = 0
    stack: list[tuple[Owner, int, ExportItem]] = [
        (RootOf(page_title=page.title), order, child)
        for order, child in reversed(list(enumerate(page.children)))
    ]
    while stack:
        owner, order, child = stack.pop()
        store.upsert_item(Item(
            id=child.uid,
            owner=owner,
            order_in_parent=order,
            contents=child.string,
            create_time=child.create_time,
            edit_time=child.edit_time,
        ))
        item_count += 1

        child_owner = ChildOf(item_id=child.uid)
        stack.extend(
            (child_owner, grandchild_order, grandchild)
            for grandchild_order, grandchild in reversed(list(enumerate(child.children)))
        )

    return item_count


def import_export(store: NoteStore, export: RoamExport) -> ImportResult:
    """Load every page of an export into the store.

    All pages and items are written in one transaction: if any write fails,
    nothing from this export is kept. Afterwards, embeddings whose item is
    no longer in the store are deleted.
    """
    total_pages = len(export.pages)
    logger.info("Loaded Roam export: num_pages=%d num_items=%d", total_pages, export.count_items())

    items_inserted = 0
    with store.transaction():
        for i, page in enumerate(export.pages):
            items_inserted += insert_page(store, page)

            if i % IMPORT_LOG_INTERVAL == 0:
                logger.info(
                    "new_pages=%d new_items=%d total_pages=%d",
                    i + 1, items_inserted, total_pages,
                )

    num_deleted = store.delete_orphaned_embeddings()
    logger.info("Deleted %d orphaned embeddings", num_deleted)

    return ImportResult(
        pages=total_pages,
        items=items_inserted,
        orphaned_embeddings_deleted=num_deleted,
    )
