"""Tests for JSON storage utilities."""

import json
import tempfile
from pathlib import Path

import pytest
from pydantic import ValidationError

from thirdbrain.models import RoamExport, ThirdBrainConfig
from thirdbrain.storage import read_json, read_json_typed, write_json


class TestJSONOperations:
    """Tests for JSON read/write operations."""

    def test_write_read_json(self) -> None:
        """Test basic JSON write and read."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "test.json"
            data = {"key": "value", "nested": {"a": 1}}

            write_json(path, data)
            result = read_json(path)

            assert result == data

    def test_write_creates_parent_dirs(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "a" / "b" / "test.json"

            write_json(path, {"x": 1})

            assert path.exists()

    def test_write_model(self) -> None:
        """Test that a pydantic model is written as its JSON fields."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "config.json"

            write_json(path, ThirdBrainConfig(batch_size=8))

            data = json.loads(path.read_text())
            assert data["batch_size"] == 8
            assert data["distance_metric"] == "cosine"


class TestTypedReading:
    """Tests for reading JSON into models."""

    def test_read_export(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "export.json"
            path.write_text(json.dumps([{"title": "Alpha", "edit-time": 1, "children": []}]))

            export = read_json_typed(path, RoamExport)

            assert export.pages[0].title == "Alpha"

    def test_read_invalid(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "export.json"
            path.write_text(json.dumps({"not": "a list"}))

            with pytest.raises(ValidationError):
                read_json_typed(path, RoamExport)
