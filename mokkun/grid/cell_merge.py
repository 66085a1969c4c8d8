"""Cell merge resolution.

A row may carry ``_cellMerge``: column id -> ``{hidden, colspan, rowspan}``.
A hidden cell is covered by a merge anchored elsewhere and is omitted
from the row. Spans must be positive integers; anything else means 1.

Only single-cell lookups happen here. Whether the directives tile the
table consistently is up to whoever produced the rows; a bad tiling
renders wrong but never fails.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from ..models import CELL_MERGE_KEY, CELL_MERGE_KEY_ALT, Column, Row


@dataclass(frozen=True)
class CellSpan:
    """Resolved spans of one rendered cell."""

    colspan: int = 1
    rowspan: int = 1

    @property
    def is_merged(self) -> bool:
        """Whether the cell covers more than itself."""
        return self.colspan > 1 or self.rowspan > 1


def normalize_span(value: Any) -> int:
    """Accept a positive integer span; fall back to 1 for anything else."""
    if isinstance(value, bool):
        return 1
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, int) and value > 0:
        return value
    return 1


def merge_directive(row: Row, column_id: str) -> Mapping[str, Any] | None:
    """Raw merge directive of one cell, if any."""
    merges = row.get(CELL_MERGE_KEY)
    if merges is None:
        merges = row.get(CELL_MERGE_KEY_ALT)
    if not isinstance(merges, Mapping):
        return None
    directive = merges.get(column_id)
    return directive if isinstance(directive, Mapping) else None


def resolve_cell(row: Row, column_id: str) -> CellSpan | None:
    """Spans of one cell, or None when the cell is hidden by a merge."""
    directive = merge_directive(row, column_id)
    if directive is None:
        return CellSpan()
    if directive.get("hidden"):
        return None
    return CellSpan(
        colspan=normalize_span(directive.get("colspan")),
        rowspan=normalize_span(directive.get("rowspan")),
    )


def resolve_row_cells(row: Row, columns: Sequence[Column]) -> list[tuple[Column, CellSpan]]:
    """Visible cells of a row, in column order, hidden cells left out."""
    cells = []
    for column in columns:
        span = resolve_cell(row, column.id)
        if span is not None:
            cells.append((column, span))
    return cells


def header_span(column: Column) -> CellSpan:
    """Header cell spans of a column, validated like body cells."""
    return CellSpan(
        colspan=normalize_span(column.colspan),
        rowspan=normalize_span(column.rowspan),
    )
