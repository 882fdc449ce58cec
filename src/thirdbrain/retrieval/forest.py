"""Rebuild the outline around a set of search hits.

A ResultForest collects (item, distance) hits and, once all are in, produces
one SubsetPage per page that was hit. Each SubsetPage is the stored outline
of that page pruned down to the hits and their ancestors, with siblings kept
in authoring order and pages ordered from most to least relevant.
"""
from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..store import NoteStore
from .ancestors import get_ancestor_ids


@dataclass
class SubsetItem:
    """An item in a pruned outline.

    distance is set only for items that were search hits; the rest are
    included as context for a hit below them.
    """
    id: str
    distance: Optional[float] = None
    children: list["SubsetItem"] = field(default_factory=list)


@dataclass
class SubsetPage:
    """A page in a pruned outline, with the distance of its best hit."""
    title: str
    min_distance: float
    children: list[SubsetItem] = field(default_factory=list)


@dataclass
class ResultPage:
    """Per-page accumulator of hits."""
    title: str
    min_distance: float
    # Every hit and every ancestor of a hit
    included_items: set[str] = field(default_factory=set)
    # Hits only
    item_distances: dict[str, float] = field(default_factory=dict)

    def add(self, ancestor_ids: Iterable[str], item_id: str, distance: float) -> None:
        self.included_items.update(ancestor_ids)
        previous = self.item_distances.get(item_id)
        if previous is None or distance < previous:
            self.item_distances[item_id] = distance
        if distance < self.min_distance:
            self.min_distance = distance

    def get_subset_page(self, store: NoteStore) -> SubsetPage:
        """Prune the stored outline of this page down to the included items."""
        page = SubsetPage(title=self.title, min_distance=self.min_distance)

        # (child ids in authoring order, list the kept children are appended to)
        stack: list[tuple[list[str], list[SubsetItem]]] = [
            (store.get_page_children(self.title), page.children)
        ]
        while stack:
            child_ids, siblings = stack.pop()
            for child_id in child_ids:
                if child_id not in self.included_items:
                    continue
                subset_item = SubsetItem(id=child_id, distance=self.item_distances.get(child_id))
                siblings.append(subset_item)
                stack.append((store.get_item_children(child_id), subset_item.children))

        return page


class ResultForest:
    """Search hits grouped by page, rebuilt into pruned outlines on demand."""

    def __init__(self) -> None:
        self.pages: dict[str, ResultPage] = {}

    def __len__(self) -> int:
        return len(self.pages)

    def add_item(self, store: NoteStore, item_id: str, distance: float) -> None:
        """Add a hit to the forest.

        The item and all its ancestors become part of its page's outline.
        Adding hits in any order gives the same forest, and adding the same
        hit twice changes nothing.

        Raises:
            NotFoundError: If the item or one of its ancestors is missing.
            IntegrityViolation: If the item's parent chain is malformed.
        """
        page_title, ancestor_ids = get_ancestor_ids(store, item_id)

        page = self.pages.get(page_title)
        if page is None:
            page = ResultPage(title=page_title, min_distance=distance)
            self.pages[page_title] = page

        page.add(ancestor_ids, item_id, distance)

    def add_hits(self, store: NoteStore, hits: Iterable[tuple[float, str]]) -> "ResultForest":
        """Add every (distance, item_id) pair from a similarity search."""
        for distance, item_id in hits:
            self.add_item(store, item_id, distance)
        return self

    def get_subset_page_list(self, store: NoteStore) -> list[SubsetPage]:
        """Return the pruned outline of each page, best page first.

        Pages are ordered by their minimum distance, then by title.
        """
        pages = sorted(self.pages.values(), key=lambda page: (page.min_distance, page.title))
        return [page.get_subset_page(store) for page in pages]
