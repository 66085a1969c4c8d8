"""Tests for row selection."""

from __future__ import annotations

import pytest

from mokkun.grid.selection import (
    is_all_selected,
    prune_selection,
    select_all,
    select_row,
    selected_rows,
)


PAGE = [{"id": 1}, {"id": 2}, {"id": 3}]


class TestSelectRow:
    """Tests for select_row()."""

    @pytest.mark.parametrize("row_id", [1, 2, 3, 2, 1])
    def test_single_mode_holds_at_most_one(self, row_id):
        """Single mode replaces the selection."""
        selected = select_row(frozenset({9}), row_id, "single")
        assert selected == {row_id}
        assert len(selected) <= 1

    def test_multiple_mode_toggles(self):
        """Multiple mode adds then removes."""
        once = select_row(frozenset({5}), 1, "multiple")
        assert once == {1, 5}
        assert select_row(once, 1, "multiple") == {5}

    def test_none_mode_is_noop(self):
        """Selection disabled leaves the set unchanged."""
        start = frozenset({1})
        assert select_row(start, 2, "none") is start

    def test_returns_new_set(self):
        """The previous snapshot is not mutated."""
        start = frozenset({1})
        select_row(start, 2, "multiple")
        assert start == {1}


class TestSelectAll:
    """Tests for select_all() and is_all_selected()."""

    def test_select_all_adds_page_ids_only(self):
        """Ids outside the page are preserved."""
        assert select_all(frozenset({99}), PAGE, True, "multiple") == {1, 2, 3, 99}

    def test_clear_all_removes_page_ids_only(self):
        """Clearing keeps selections made on other pages."""
        assert select_all(frozenset({1, 2, 99}), PAGE, False, "multiple") == {99}

    @pytest.mark.parametrize("mode", ["none", "single"])
    def test_only_multiple_mode(self, mode):
        """Select-all is a no-op outside multiple mode."""
        assert select_all(frozenset(), PAGE, True, mode) == frozenset()

    def test_is_all_selected(self):
        """Header checkbox is checked only when every page row is selected."""
        assert is_all_selected(frozenset({1, 2, 3, 4}), PAGE)
        assert not is_all_selected(frozenset({1, 2}), PAGE)
        assert not is_all_selected(frozenset({1}), [])


class TestResolveSelection:
    """Tests for selected_rows() and prune_selection()."""

    def test_selected_rows_in_dataset_order(self):
        """Rows come back in dataset order, not click order."""
        rows = [{"id": "a"}, {"id": "b"}, {"id": "c"}]
        assert selected_rows(rows, frozenset({"c", "a"})) == [{"id": "a"}, {"id": "c"}]

    def test_prune_drops_stale_ids(self):
        """Ids no longer present are removed."""
        assert prune_selection(frozenset({1, 7}), PAGE) == {1}
