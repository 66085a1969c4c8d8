"""Row grouping and per-group collapse state."""

from __future__ import annotations

from collections.abc import Iterable

from ..models import Row
from .pipeline import stringify


def group_key(row: Row, field: str) -> str:
    """Group name of a row; a missing value maps to the unnamed group ""."""
    return stringify(row.get(field))


def group_rows(rows: Iterable[Row], field: str) -> dict[str, list[Row]]:
    """Cluster rows by ``field``.

    Group names keep the order in which they are first encountered, not
    alphabetical order, and each group keeps its rows' incoming order.
    """
    groups: dict[str, list[Row]] = {}
    for row in rows:
        groups.setdefault(group_key(row, field), []).append(row)
    return groups


def order_by_groups(rows: Iterable[Row], field: str) -> list[Row]:
    """Reorder rows into contiguous group blocks."""
    return [row for members in group_rows(rows, field).values() for row in members]


def group_names(rows: Iterable[Row], field: str) -> frozenset[str]:
    """Every non-empty group name present in ``rows``."""
    return frozenset(name for name in (group_key(row, field) for row in rows) if name)


def toggle_group(collapsed: frozenset[str], name: str) -> frozenset[str]:
    """Flip one group between collapsed and expanded.

    The unnamed group has no header and so can never be collapsed.
    """
    if not name:
        return collapsed
    if name in collapsed:
        return collapsed - {name}
    return collapsed | {name}


def collapse_all_groups(original_data: Iterable[Row], field: str) -> frozenset[str]:
    """Collapsed set covering every group in the full dataset."""
    return group_names(original_data, field)


def expand_all_groups() -> frozenset[str]:
    """Collapsed set with nothing collapsed."""
    return frozenset()
