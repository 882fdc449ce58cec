"""Tests for importing RoamResearch exports."""

import json
import tempfile
from pathlib import Path

import pytest

from thirdbrain.importer import import_export, insert_page, load_export
from thirdbrain.models import ChildOf, ExportItem, ExportPage, RoamExport, RootOf
from thirdbrain.store import NoteStore


EXPORT = [
    {
        "title": "Gardening",
        "create-time": 1690000000000,
        "edit-time": 1690000500000,
        "create-email": "me@example.com",
        "children": [
            {
                "uid": "aaa111",
                "string": "Tomatoes",
                "create-time": 1690000001000,
                "edit-time": 1690000002000,
                "children": [
                    {"uid": "bbb222", "string": "Need full sun"},
                    {"uid": "ccc333", "string": "Water daily"},
                ],
            },
            {"uid": "ddd444", "string": "Compost"},
        ],
    },
    {
        "title": "Empty page",
        "edit-time": 1690000600000,
    },
]


@pytest.fixture
def export_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "export.json"
        path.write_text(json.dumps(EXPORT))
        yield path


@pytest.fixture
def store():
    with tempfile.TemporaryDirectory() as tmpdir:
        with NoteStore(Path(tmpdir) / "notes.db") as store:
            yield store


class TestLoadExport:
    """Tests for parsing the export file."""

    def test_parses_pages_and_items(self, export_file) -> None:
        export = load_export(export_file)

        assert [page.title for page in export.pages] == ["Gardening", "Empty page"]
        assert export.pages[0].create_time == 1690000000000
        assert export.pages[0].create_email == "me@example.com"
        assert export.pages[0].children[0].children[1].string == "Water daily"
        assert export.pages[1].children == []
        assert export.count_items() == 4

    def test_page_requires_edit_time(self) -> None:
        with pytest.raises(ValueError):
            RoamExport.model_validate([{"title": "No time"}])


class TestImport:
    """Tests for loading an export into the store."""

    def test_import_writes_outline(self, store, export_file) -> None:
        """Test that pages, items, owners and sibling order are stored."""
        result = import_export(store, load_export(export_file))

        assert result.pages == 2
        assert result.items == 4
        assert store.get_page("Empty page").edit_time == 1690000600000
        assert store.get_page_children("Gardening") == ["aaa111", "ddd444"]
        assert store.get_item_children("aaa111") == ["bbb222", "ccc333"]

        tomatoes = store.get_item("aaa111")
        assert tomatoes.owner == RootOf(page_title="Gardening")
        assert tomatoes.contents == "Tomatoes"
        assert tomatoes.edit_time == 1690000002000

        water = store.get_item("ccc333")
        assert water.owner == ChildOf(item_id="aaa111")
        assert water.order_in_parent == 1

    def test_reimport_is_idempotent(self, store, export_file) -> None:
        export = load_export(export_file)
        import_export(store, export)
        import_export(store, export)

        assert store.get_stats()["items"] == 4
        assert store.get_stats()["pages"] == 2

    def test_reimport_updates_moved_items(self, store) -> None:
        """Test that an item moved to another parent is updated in place."""
        import_export(store, RoamExport.model_validate(EXPORT))

        moved = json.loads(json.dumps(EXPORT))
        water = moved[0]["children"][0]["children"].pop()
        water["string"] = "Water weekly"
        moved[0]["children"][1]["children"] = [water]
        import_export(store, RoamExport.model_validate(moved))

        item = store.get_item("ccc333")
        assert item.owner == ChildOf(item_id="ddd444")
        assert item.contents == "Water weekly"
        assert item.order_in_parent == 0

    def test_deletes_orphaned_embeddings(self, store, export_file) -> None:
        """Test that embeddings of items no longer in the store are removed."""
        import_export(store, load_export(export_file))
        store.upsert_embedding("ddd444", "Gardening\nCompost", [1.0])
        store.conn.execute("PRAGMA foreign_keys = OFF")
        store.conn.execute("DELETE FROM item WHERE id = 'ddd444'")
        store.conn.execute("PRAGMA foreign_keys = ON")

        result = import_export(store, RoamExport.model_validate(EXPORT[1:]))

        assert result.orphaned_embeddings_deleted == 1
        assert store.get_embedding("ddd444") is None

    def test_failed_import_keeps_nothing(self, store, monkeypatch) -> None:
        """Test that an import failing partway leaves the store untouched."""
        export = RoamExport.model_validate(EXPORT)

        def failing_insert(store, page):
            if page.title == "Empty page":
                raise RuntimeError("disk full")
            return insert_page(store, page)

        monkeypatch.setattr("thirdbrain.importer.insert_page", failing_insert)

        with pytest.raises(RuntimeError):
            import_export(store, export)

        assert store.get_stats()["pages"] == 0
        assert store.get_stats()["items"] == 0


class TestInsertPage:
    """Tests for insert_page."""

    def test_deep_outline(self, store) -> None:
        """Test that deeply nested outlines are written without recursion limits."""
        item = ExportItem(uid="n1999", string="level 1999")
        for depth in range(1998, -1, -1):
            item = ExportItem(uid=f"n{depth}", string=f"level {depth}", children=[item])

        page = ExportPage(title="Deep", edit_time=1, children=[item])
        count = insert_page(store, page)

        assert count == 2000
        assert store.get_item("n0").owner == RootOf(page_title="Deep")
        assert store.get_item("n1999").owner == ChildOf(item_id="n1998")
