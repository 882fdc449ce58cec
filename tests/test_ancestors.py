"""Tests for ancestor resolution."""

import tempfile
from pathlib import Path

import pytest

from thirdbrain import config
from thirdbrain.errors import IntegrityViolation, NotFoundError
from thirdbrain.models import ChildOf, Item, Page, RootOf
from thirdbrain.retrieval.ancestors import get_ancestor_ids, get_ancestor_items, get_context_text
from thirdbrain.store import NoteStore


@pytest.fixture
def store():
    """Alpha > A > B > C, plus a root item D."""
    with tempfile.TemporaryDirectory() as tmpdir:
        with NoteStore(Path(tmpdir) / "notes.db") as store:
            store.upsert_page(Page(title="Alpha", edit_time=1))
            store.upsert_item(Item(id="A", owner=RootOf(page_title="Alpha"), order_in_parent=0, contents="first"))
            store.upsert_item(Item(id="B", owner=ChildOf(item_id="A"), order_in_parent=0, contents="second"))
            store.upsert_item(Item(id="C", owner=ChildOf(item_id="B"), order_in_parent=0, contents="third"))
            store.upsert_item(Item(id="D", owner=RootOf(page_title="Alpha"), order_in_parent=1, contents="other"))
            yield store


class TestAncestorIds:
    """Tests for get_ancestor_ids."""

    def test_nested_item(self, store) -> None:
        """Test that the path runs from the root item down to the item."""
        path = get_ancestor_ids(store, "C")

        assert path.page_title == "Alpha"
        assert path.item_ids == ["A", "B", "C"]

    def test_root_item(self, store) -> None:
        """Test that a root item's path is just itself."""
        assert get_ancestor_ids(store, "D") == ("Alpha", ["D"])

    def test_missing_item(self, store) -> None:
        with pytest.raises(NotFoundError):
            get_ancestor_ids(store, "Z")

    def test_items_are_returned_in_order(self, store) -> None:
        page_title, items = get_ancestor_items(store, "B")
        assert page_title == "Alpha"
        assert [item.contents for item in items] == ["first", "second"]


class TestIntegrityFaults:
    """Tests for malformed parent chains."""

    def test_cycle_detected(self, store) -> None:
        """Test that a parent chain looping back on itself is reported."""
        store.conn.execute("PRAGMA foreign_keys = OFF")
        store.conn.execute("UPDATE item SET parent_page_id = NULL, parent_item_id = 'C' WHERE id = 'A'")

        with pytest.raises(IntegrityViolation, match="loops"):
            get_ancestor_ids(store, "C")

    def test_dangling_parent(self, store) -> None:
        """Test that a parent that doesn't exist is reported as missing."""
        store.conn.execute("PRAGMA foreign_keys = OFF")
        store.conn.execute("UPDATE item SET parent_item_id = 'ghost' WHERE id = 'B'")

        with pytest.raises(NotFoundError):
            get_ancestor_ids(store, "C")

    def test_depth_limit(self, store, monkeypatch) -> None:
        """Test that an outline deeper than the limit is reported."""
        monkeypatch.setattr("thirdbrain.retrieval.ancestors.MAX_TREE_DEPTH", 2)

        with pytest.raises(IntegrityViolation, match="deeper"):
            get_ancestor_ids(store, "C")
        assert get_ancestor_ids(store, "B").item_ids == ["A", "B"]

    def test_default_depth_limit(self) -> None:
        assert config.MAX_TREE_DEPTH == 10_000


class TestContextText:
    """Tests for the text embedded for an item."""

    def test_includes_title_and_ancestors(self, store) -> None:
        assert get_context_text(store, "C") == "Alpha\nfirst\nsecond\nthird"

    def test_root_item(self, store) -> None:
        assert get_context_text(store, "D") == "Alpha\nother"
