"""Load data table definitions from YAML or JSON files.

A file may hold a single ``data_table`` field, or a whole screen
definition in which ``data_table`` fields appear anywhere (typically
under ``fields``). Example YAML:

    id: users
    type: data_table
    columns:
      - id: name
        label: 氏名
        sortable: true
    data:
      - id: 1
        name: 山田太郎

Usage:
    from mokkun.loader import load_table_definition

    config = load_table_definition("screens/users.yaml")
"""

from __future__ import annotations

import json

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import yaml

from pydantic import ValidationError

from .exceptions import TableDefinitionError
from .log import debug
from .models import DataTableConfig


DATA_TABLE_TYPE = "data_table"
JSON_SUFFIXES = frozenset({".json"})


def read_document(path: str | Path) -> Any:
    """Parse a YAML or JSON file.

    Raises
    ------
    TableDefinitionError
        If the file is missing, unreadable, or not valid YAML/JSON.
    """
    path = Path(path)
    if not path.is_file():
        raise TableDefinitionError("Definition file not found", path=str(path))

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise TableDefinitionError(f"Cannot read definition file: {e}", path=str(path)) from e

    try:
        if path.suffix.lower() in JSON_SUFFIXES:
            document = json.loads(text)
        else:
            document = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise TableDefinitionError(f"Invalid definition syntax: {e}", path=str(path)) from e

    if document is None:
        raise TableDefinitionError("Empty definition file", path=str(path))
    return document


def _is_table(node: Any) -> bool:
    return isinstance(node, dict) and node.get("type") == DATA_TABLE_TYPE


def iter_table_nodes(document: Any) -> Iterator[dict[str, Any]]:
    """Yield every ``data_table`` mapping in a document, depth first."""
    if _is_table(document):
        yield document
        return
    if isinstance(document, dict):
        for value in document.values():
            yield from iter_table_nodes(value)
    elif isinstance(document, list):
        for value in document:
            yield from iter_table_nodes(value)


def _validate(node: dict[str, Any], path: Path) -> DataTableConfig:
    try:
        return DataTableConfig.model_validate(node)
    except ValidationError as e:
        raise TableDefinitionError(
            f"Invalid data table definition: {e.error_count()} validation error(s)",
            path=str(path),
            table_id=node.get("id"),
            errors=[f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()],
        ) from e


def load_table_definitions(path: str | Path) -> list[DataTableConfig]:
    """Load every data table declared in a file.

    A top-level mapping without a ``type`` but with ``columns`` is read
    as a bare table definition.
    """
    path = Path(path)
    document = read_document(path)

    if isinstance(document, dict) and "type" not in document and "columns" in document:
        nodes = [document]
    else:
        nodes = list(iter_table_nodes(document))

    debug(f"Found {len(nodes)} data table(s) in {path}")
    return [_validate(node, path) for node in nodes]


def load_table_definition(path: str | Path, table_id: str | None = None) -> DataTableConfig:
    """Load one data table from a file.

    Parameters
    ----------
    path : str or Path
        YAML (``.yaml``/``.yml``) or JSON (``.json``) file.
    table_id : str, optional
        Which table to pick when the file declares several.

    Returns
    -------
    DataTableConfig
        The validated table definition.

    Raises
    ------
    TableDefinitionError
        If the file cannot be read, declares no matching table, is
        ambiguous, or fails validation.
    """
    path = Path(path)
    tables = load_table_definitions(path)

    if table_id is not None:
        matches = [t for t in tables if t.id == table_id]
        if not matches:
            raise TableDefinitionError(
                f"No data table with id '{table_id}'",
                path=str(path),
                available=[t.id for t in tables],
            )
        return matches[0]

    if not tables:
        raise TableDefinitionError("No data table definition found", path=str(path))
    if len(tables) > 1:
        raise TableDefinitionError(
            "Several data tables found; pass a table id",
            path=str(path),
            available=[t.id for t in tables],
        )
    return tables[0]
