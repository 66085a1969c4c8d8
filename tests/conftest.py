"""Pytest configuration and fixtures."""

from __future__ import annotations

import os

from typing import TYPE_CHECKING, Any

import pytest

from mokkun.config import MokkunSettings, clear_settings
from mokkun.log import set_level
from mokkun.models import DataTableConfig


if TYPE_CHECKING:
    from collections.abc import Generator


# =============================================================================
# Settings isolation
# =============================================================================


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path) -> Generator[None, None, None]:
    """Run every test away from real config files and MOKKUN_* variables."""
    for key in list(os.environ):
        if key.startswith("MOKKUN_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("APPDATA", str(tmp_path / "appdata"))
    monkeypatch.chdir(tmp_path)
    clear_settings()
    yield
    clear_settings()
    set_level("WARNING")


@pytest.fixture
def settings() -> MokkunSettings:
    """Default settings."""
    return MokkunSettings()


# =============================================================================
# Table definitions
# =============================================================================


def make_rows(count: int, **extra: Any) -> list[dict[str, Any]]:
    """Rows with ids 1..count and a zero-padded name."""
    return [{"id": i, "name": f"user{i:02d}", **extra} for i in range(1, count + 1)]


@pytest.fixture
def users_config() -> DataTableConfig:
    """A small user table with filters, grouping, actions and selection."""
    return DataTableConfig.model_validate(
        {
            "id": "users",
            "type": "data_table",
            "label": "Users",
            "selection": "multiple",
            "columns": [
                {"id": "name", "label": "Name"},
                {"id": "age", "label": "Age", "format": "number", "width": "80px"},
                {
                    "id": "status",
                    "label": "Status",
                    "format": "status",
                    "status_map": {
                        "active": {"label": "Active", "color": "success"},
                        "inactive": {"label": "Inactive", "color": "danger"},
                    },
                },
                {"id": "team", "label": "Team", "sortable": False},
                {"id": "joined", "label": "Joined", "format": "date"},
            ],
            "data": [
                {"id": 1, "name": "Bob", "age": 31, "status": "active", "team": "A", "joined": "2024-01-05"},
                {"id": 2, "name": "Al", "age": 25, "status": "inactive", "team": "A", "joined": "2024-02-10"},
                {"id": 3, "name": "Cy", "age": None, "status": "active", "team": "B", "joined": "2024-03-15"},
                {"id": 4, "name": "Di", "age": 47, "status": "pending", "team": "B", "joined": "2023-12-31"},
            ],
            "filters": {
                "fields": [
                    {"id": "q", "label": "Name", "column": "name", "type": "text"},
                    {"id": "status", "label": "Status", "column": "status", "type": "select"},
                    {"id": "age", "label": "Age", "column": "age", "type": "number_range"},
                    {"id": "joined", "label": "Joined", "column": "joined", "type": "date_range"},
                ]
            },
            "row_actions": [
                {"id": "edit", "label": "Edit", "style": "primary"},
                {
                    "id": "delete",
                    "label": "Delete",
                    "style": "danger",
                    "confirm": {"title": "Delete?", "message": "This cannot be undone"},
                },
            ],
        }
    )


@pytest.fixture
def paged_config() -> DataTableConfig:
    """25 rows paginated by 10."""
    return DataTableConfig.model_validate(
        {
            "id": "paged",
            "columns": [{"id": "name", "label": "Name"}],
            "data": make_rows(25),
            "pagination": {"enabled": True, "page_size": 10},
            "selection": "multiple",
        }
    )


@pytest.fixture
def grouped_config() -> DataTableConfig:
    """Rows grouped by team."""
    return DataTableConfig.model_validate(
        {
            "id": "grouped",
            "columns": [{"id": "name", "label": "Name"}, {"id": "team", "label": "Team"}],
            "data": [
                {"id": 1, "name": "a1", "team": "A"},
                {"id": 2, "name": "b1", "team": "B"},
                {"id": 3, "name": "a2", "team": "A"},
                {"id": 4, "name": "none", "team": None},
            ],
            "grouping": {"enabled": True, "field": "team"},
            "selection": "multiple",
        }
    )


@pytest.fixture
def resizable_config() -> DataTableConfig:
    """Two resizable columns with default bounds and one fixed-size column."""
    return DataTableConfig.model_validate(
        {
            "id": "resizable",
            "columns": [
                {"id": "c1", "label": "C1", "width": "120px"},
                {"id": "c2", "label": "C2", "min_width": 100, "max_width": 200},
                {"id": "c3", "label": "C3", "resizable": False},
            ],
            "data": [{"id": 1, "c1": "x", "c2": "y", "c3": "z"}],
            "column_resize": {"enabled": True, "min_width": 50, "max_width": 500},
        }
    )


@pytest.fixture
def row_factory():
    """Factory building rows with ids 1..count."""
    return make_rows
