"""Resolve an item's chain of ancestors up to its page."""
from collections import deque
from typing import NamedTuple

from ..config import MAX_TREE_DEPTH
from ..errors import IntegrityViolation
from ..models import ChildOf, Item, RootOf
from ..store import NoteStore


class AncestorPath(NamedTuple):
    """Where an item sits: its page, and the ids from the page's root item down to it."""

    page_title: str
    item_ids: list[str]


def get_ancestor_items(store: NoteStore, item_id: str) -> tuple[str, list[Item]]:
    """Walk parent links from an item up to its page.

    Returns:
        The page title and the items on the path, root item first and the
        requested item last.

    Raises:
        NotFoundError: If the item or one of its ancestors is missing.
        IntegrityViolation: If the parent chain loops or exceeds MAX_TREE_DEPTH.
    """
    path: deque[Item] = deque()
    seen: set[str] = set()

    current = item_id
    while True:
        if current in seen:
            raise IntegrityViolation(f"Parent chain of item {item_id!r} loops back to {current!r}")
        if len(path) >= MAX_TREE_DEPTH:
            raise IntegrityViolation(
                f"Parent chain of item {item_id!r} is deeper than {MAX_TREE_DEPTH}"
            )
        seen.add(current)

        item = store.get_item(current)
        path.appendleft(item)

        owner = item.owner
        if isinstance(owner, ChildOf):
            current = owner.item_id
        elif isinstance(owner, RootOf):
            return owner.page_title, list(path)
        else:
            raise IntegrityViolation(f"Item {current!r} has an unknown owner: {owner!r}")


def get_ancestor_ids(store: NoteStore, item_id: str) -> AncestorPath:
    """Get the page of an item and the ids on the path down to it, inclusive."""
    page_title, items = get_ancestor_items(store, item_id)
    return AncestorPath(page_title, [item.id for item in items])


def get_context_text(store: NoteStore, item_id: str) -> str:
    """Text to embed for an item: its page title, then each ancestor's contents down to it.

    One line per level, ending with the item's own contents.
    """
    page_title, items = get_ancestor_items(store, item_id)
    return "\n".join([page_title, *(item.contents for item in items)])
