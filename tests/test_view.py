"""Tests for the render-ready view projection and the text adapter."""

from __future__ import annotations

import io

from mokkun.grid import (
    FilterApply,
    GridController,
    GroupToggle,
    RenderAdapter,
    SelectAll,
    SortRequest,
    TextRenderAdapter,
    build_view,
    create_state,
    render_text,
)
from mokkun.grid.view import table_classes
from mokkun.models import DataTableConfig


# =============================================================================
# Header and table chrome
# =============================================================================


class TestHeader:
    """Tests for header cells and table classes."""

    def test_sort_indicator(self, users_config, settings):
        """The sorted column shows its arrow and the next direction."""
        grid = GridController(users_config, settings)
        grid.dispatch(SortRequest(column_id="name"))
        header = {cell.column_id: cell for cell in grid.view().header}
        assert header["name"].sort_indicator == "↑"
        assert header["name"].next_direction == "desc"
        assert "sorted-asc" in header["name"].classes
        assert header["age"].sort_indicator == ""
        assert header["age"].next_direction == "asc"

    def test_descending_indicator(self, users_config, settings):
        """Descending sorts show a down arrow."""
        grid = GridController(users_config, settings)
        grid.set_sort("name", "desc")
        assert grid.view().header[0].sort_indicator == "↓"

    def test_non_sortable_header(self, users_config, settings):
        """sortable false drops the sortable class."""
        view = build_view(users_config, create_state(users_config, settings), settings)
        team = next(cell for cell in view.header if cell.column_id == "team")
        assert not team.sortable
        assert "sortable" not in team.classes

    def test_default_table_classes(self, users_config):
        """Defaults are hoverable and responsive only."""
        assert table_classes(users_config) == ["mokkun-data-table", "hoverable", "responsive"]

    def test_optional_table_classes(self, resizable_config):
        """Enabled options add their class."""
        data = resizable_config.model_dump()
        data.update(striped=True, bordered=True, fixed_header=True, layout="fixed")
        classes = table_classes(DataTableConfig.model_validate(data))
        for name in ("striped", "bordered", "fixed-header", "resizable-columns", "layout-fixed"):
            assert name in classes

    def test_column_count(self, users_config, settings):
        """Selection and action columns are counted."""
        view = build_view(users_config, create_state(users_config, settings), settings)
        assert view.column_count == 7

    def test_widths_reflect_preview(self, resizable_config, settings):
        """Headers show committed widths and resize flags."""
        grid = GridController(resizable_config, settings)
        grid.set_column_width("c1", 222)
        header = {cell.column_id: cell for cell in grid.view().header}
        assert header["c1"].width == 222
        assert header["c1"].resizable
        assert not header["c3"].resizable


# =============================================================================
# Body
# =============================================================================


class TestBody:
    """Tests for body rows and cells."""

    def test_cells_are_formatted(self, users_config, settings):
        """Cells carry formatted text and badge classes."""
        view = build_view(users_config, create_state(users_config, settings), settings)
        first = {cell.column_id: cell for cell in view.rows[0].cells}
        assert first["status"].text == "Active"
        assert first["status"].badge_class == "status-badge status-success"
        assert first["joined"].text == "2024/1/5"
        third = {cell.column_id: cell for cell in view.rows[2].cells}
        assert third["age"].text == "-"
        fourth = {cell.column_id: cell for cell in view.rows[3].cells}
        assert fourth["status"].badge_class == "status-badge status-default"

    def test_row_actions(self, users_config, settings):
        """Actions carry their style class and confirm gate."""
        view = build_view(users_config, create_state(users_config, settings), settings)
        edit, delete = view.rows[0].actions
        assert edit.style_class == "btn-primary"
        assert edit.confirm is None
        assert delete.confirm.title == "Delete?"

    def test_merged_cells(self, settings):
        """Hidden cells are omitted and anchors carry spans."""
        config = DataTableConfig(
            id="m",
            columns=[{"id": "a"}, {"id": "b"}],
            data=[{"id": 1, "a": "x", "b": "y", "_cellMerge": {"a": {"colspan": 2}, "b": {"hidden": True}}}],
        )
        row = build_view(config, create_state(config, settings), settings).rows[0]
        assert [(cell.column_id, cell.colspan) for cell in row.cells] == [("a", 2)]

    def test_selected_rows_and_header_checkbox(self, users_config, settings):
        """Selection marks rows and the header checkbox."""
        grid = GridController(users_config, settings)
        grid.dispatch(SelectAll(selected=True))
        view = grid.view()
        assert all(row.selected for row in view.rows)
        assert view.selection.all_selected
        assert view.selection.selected_count == 4

    def test_filters_expose_values(self, users_config, settings):
        """Filter fields carry the applied values."""
        grid = GridController(users_config, settings)
        grid.dispatch(FilterApply(values={"q": "b"}))
        filters = {field.filter_id: field for field in grid.view().filters}
        assert filters["q"].value == "b"
        assert filters["status"].value is None


class TestGroups:
    """Tests for group header items."""

    def test_group_headers_precede_members(self, grouped_config, settings):
        """Named groups get headers, the unnamed group does not."""
        view = build_view(grouped_config, create_state(grouped_config, settings), settings)
        layout = [
            item.name if item.kind == "group" else item.row_id for item in view.items
        ]
        assert layout == ["A", 1, 3, "B", 2, 4]
        assert [(g.name, g.count, g.total_count) for g in view.groups] == [("A", 2, 2), ("B", 1, 1)]

    def test_collapsed_group_hides_rows(self, grouped_config, settings):
        """A collapsed group keeps its header and loses its rows."""
        grid = GridController(grouped_config, settings)
        grid.dispatch(GroupToggle(group="A"))
        view = grid.view()
        assert view.groups[0].collapsed
        assert [row.row_id for row in view.rows] == [2, 4]
        assert "grouped" in view.classes

    def test_group_split_across_pages(self, settings, row_factory):
        """Page-local counts differ from totals when a group spans pages."""
        rows = [dict(row, team="A" if row["id"] <= 12 else "B") for row in row_factory(15)]
        config = DataTableConfig(
            id="g",
            columns=[{"id": "name"}],
            data=rows,
            grouping={"enabled": True, "field": "team"},
            pagination={"enabled": True, "page_size": 10},
        )
        view = build_view(config, create_state(config, settings), settings)
        assert [(g.name, g.count, g.total_count) for g in view.groups] == [("A", 10, 12)]


# =============================================================================
# Pagination and empty state
# =============================================================================


class TestPaginationView:
    """Tests for pager information."""

    def test_first_page(self, paged_config, settings):
        """Page 0 of 25 shows 1-10."""
        pager = build_view(paged_config, create_state(paged_config, settings), settings).pagination
        assert (pager.range_start, pager.range_end, pager.total_pages) == (1, 10, 3)
        assert not pager.has_prev
        assert pager.has_next
        assert pager.page_size_options == [10, 25, 50, 100]

    def test_last_page(self, paged_config, settings):
        """The last page is partial."""
        grid = GridController(paged_config, settings)
        grid.set_page(2)
        pager = grid.view().pagination
        assert (pager.range_start, pager.range_end) == (21, 25)
        assert pager.has_prev
        assert not pager.has_next

    def test_empty_dataset(self, paged_config, settings):
        """No rows means a 0-0 range."""
        grid = GridController(paged_config, settings)
        grid.set_data([])
        pager = grid.view().pagination
        assert (pager.range_start, pager.range_end, pager.total_pages) == (0, 0, 0)
        assert not pager.has_next

    def test_unpaginated_table(self, users_config, settings):
        """Tables without pagination have no pager."""
        assert build_view(users_config, create_state(users_config, settings), settings).pagination is None


class TestEmptyState:
    """Tests for the empty state."""

    def test_defaults(self, users_config, settings):
        """An empty result uses the built-in message."""
        grid = GridController(users_config, settings)
        grid.dispatch(FilterApply(values={"q": "zzz"}))
        empty = grid.view().empty_state
        assert empty.title == "データがありません"
        assert empty.icon == "📭"

    def test_declared_empty_state(self, settings):
        """Declared content overrides the defaults."""
        config = DataTableConfig(
            id="e",
            columns=[{"id": "a"}],
            empty_state={"title": "Nothing", "action": {"label": "Add", "handler": "add"}},
        )
        empty = build_view(config, create_state(config, settings), settings).empty_state
        assert empty.title == "Nothing"
        assert empty.icon == "📭"
        assert empty.action.handler == "add"

    def test_no_empty_state_with_rows(self, users_config, settings):
        """Tables with rows have no empty state."""
        assert build_view(users_config, create_state(users_config, settings), settings).empty_state is None


# =============================================================================
# Text rendering
# =============================================================================


class TestTextRendering:
    """Tests for render_text() and TextRenderAdapter."""

    def test_render_text(self, paged_config, settings):
        """The text frame has headers, rows and the pager line."""
        grid = GridController(paged_config, settings)
        grid.set_sort("name")
        text = render_text(grid.view())
        assert "Name↑" in text
        assert "user01" in text
        assert "25件中 1-10件を表示 (1 / 3)" in text

    def test_render_empty_and_loading(self, users_config, settings):
        """Empty and loading states are written out."""
        grid = GridController(users_config, settings)
        grid.set_filter_values({"q": "zzz"})
        grid.set_loading(True)
        text = render_text(grid.view())
        assert "📭 データがありません" in text
        assert text.endswith("読み込み中...")

    def test_render_groups(self, grouped_config, settings):
        """Group lines show the toggle arrow and counts."""
        grid = GridController(grouped_config, settings)
        grid.dispatch(GroupToggle(group="B"))
        text = render_text(grid.view())
        assert "▼ A (2/2)" in text
        assert "▶ B (1/1)" in text

    def test_adapter_follows_controller(self, users_config, settings):
        """A bound adapter receives a frame per render."""
        stream = io.StringIO()
        adapter = TextRenderAdapter(stream)
        assert isinstance(adapter, RenderAdapter)

        grid = GridController(users_config, settings)
        adapter.bind(grid.dispatch)
        grid.on("grid:render", lambda data: adapter.render(data["view"]))
        adapter.dispatch(SortRequest(column_id="age"))

        assert len(adapter.frames) == 1
        assert "Age↑" in adapter.last_frame
        assert adapter.last_frame in stream.getvalue()
