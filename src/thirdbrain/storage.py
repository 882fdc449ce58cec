"""Storage utilities for JSON files."""

import json
from pathlib import Path
from typing import Any, TypeVar, Type
from pydantic import BaseModel


T = TypeVar('T', bound=BaseModel)


def read_json(path: Path) -> Any:
    """Read a JSON file.

    Args:
        path: Path to the JSON file.

    Returns:
        Parsed JSON value.
    """
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def read_json_typed(path: Path, model: Type[T]) -> T:
    """Read a JSON file and parse it into a Pydantic model.

    Args:
        path: Path to the JSON file.
        model: Pydantic model class to parse the document into.

    Returns:
        Pydantic model instance.
    """
    with open(path, 'rb') as f:
        return model.model_validate_json(f.read())


def write_json(path: Path, data: dict | BaseModel) -> None:
    """Write a JSON file.

    Args:
        path: Path to the JSON file.
        data: Dict or Pydantic model to write.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    if isinstance(data, BaseModel):
        data = data.model_dump(mode="json")

    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)
