"""Row selection keyed by row identity.

Selection is a frozenset of row ids. Each operation returns a new set,
so earlier snapshots stay intact and ids survive filtering, sorting and
paging because they never refer to a position.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from ..log import debug
from ..models import Row, RowId, SelectionMode


def select_row(
    selected: frozenset[RowId],
    row_id: RowId,
    mode: SelectionMode,
) -> frozenset[RowId]:
    """Apply a click on one row.

    Parameters
    ----------
    selected : frozenset
        Current selection.
    row_id : str or int
        The clicked row.
    mode : str
        ``single`` replaces the selection, ``multiple`` toggles the row,
        ``none`` leaves it unchanged.

    Returns
    -------
    frozenset
        The new selection.
    """
    if mode == "single":
        return frozenset({row_id})
    if mode == "multiple":
        if row_id in selected:
            return selected - {row_id}
        return selected | {row_id}
    debug(f"Ignoring selection of row {row_id!r}: selection is disabled")
    return selected


def select_all(
    selected: frozenset[RowId],
    page_rows: Iterable[Row],
    flag: bool,
    mode: SelectionMode,
) -> frozenset[RowId]:
    """Select or clear every row currently on the page.

    Ids of rows outside ``page_rows`` are left as they are. Only
    ``multiple`` mode has a select-all control.
    """
    if mode != "multiple":
        debug(f"Ignoring select-all in '{mode}' selection mode")
        return selected
    page_ids = {row["id"] for row in page_rows}
    if flag:
        return selected | page_ids
    return selected - page_ids


def is_all_selected(selected: frozenset[RowId], page_rows: Sequence[Row]) -> bool:
    """Whether the header checkbox should render checked."""
    return bool(page_rows) and all(row["id"] in selected for row in page_rows)


def selected_rows(original_data: Iterable[Row], selected: frozenset[RowId]) -> list[Row]:
    """Resolve selected ids against the full dataset, in dataset order."""
    return [row for row in original_data if row["id"] in selected]


def prune_selection(
    selected: frozenset[RowId],
    rows: Iterable[Row],
) -> frozenset[RowId]:
    """Drop ids that no longer identify any row."""
    present = {row["id"] for row in rows}
    return frozenset(row_id for row_id in selected if row_id in present)
