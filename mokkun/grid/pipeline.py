"""Row transformation pipeline: filter -> sort -> group -> paginate.

Every function here is pure. Inputs are never mutated and each call
returns a fresh list, so a derived view can always be rebuilt from the
authoritative rows.

Malformed input is normalized rather than rejected:
- an empty filter value makes that filter inert
- an unknown sort column leaves the order unchanged
- a page outside the data yields an empty slice
"""

from __future__ import annotations

import math

from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime, timedelta, timezone
from functools import cmp_to_key, lru_cache
from typing import Any

from pyuca import Collator

from ..log import debug
from ..models import Column, FilterField, Row, SortConfig


# --- Value helpers ---


def stringify(value: Any) -> str:
    """Render a cell value the way the viewer displays it in text.

    None becomes "", booleans are lowercase and integral floats drop
    their fractional part, so ``2.0`` and ``2`` filter and group alike.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        return not math.isnan(value)
    return isinstance(value, int)


def parse_number(value: Any) -> float | None:
    """Coerce a cell or bound value to float; None when not numeric."""
    if _is_number(value):
        return float(value)
    if isinstance(value, str) and value.strip():
        try:
            number = float(value.strip())
        except ValueError:
            return None
        return None if math.isnan(number) else number
    return None


def parse_datetime(value: Any) -> tuple[datetime, bool] | None:
    """Parse a date-like value.

    Returns
    -------
    tuple of (datetime, bool) or None
        The naive UTC datetime and whether the input carried no time part.
    """
    if isinstance(value, datetime):
        parsed, date_only = value, False
    elif isinstance(value, date):
        parsed, date_only = datetime(value.year, value.month, value.day), True
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        date_only = "T" not in text and " " not in text
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed, date_only


def is_inert(value: Any) -> bool:
    """Whether a filter value is empty and should always pass."""
    if value is None or value == "":
        return True
    if isinstance(value, Mapping):
        return all(v is None or v == "" for v in value.values())
    return False


# --- Filter ---


def _match_text(cell: Any, needle: Any) -> bool:
    return stringify(needle).lower() in stringify(cell).lower()


def _match_select(cell: Any, choice: Any) -> bool:
    return stringify(cell) == stringify(choice)


def _match_number_range(cell: Any, bounds: Any) -> bool:
    if not isinstance(bounds, Mapping):
        debug(f"Ignoring number range filter with non-mapping value {bounds!r}")
        return True
    low = parse_number(bounds.get("min"))
    high = parse_number(bounds.get("max"))
    if low is None and high is None:
        return True
    number = parse_number(cell)
    if number is None:
        return False
    if low is not None and number < low:
        return False
    return not (high is not None and number > high)


def _match_date_range(cell: Any, bounds: Any) -> bool:
    if not isinstance(bounds, Mapping):
        debug(f"Ignoring date range filter with non-mapping value {bounds!r}")
        return True
    start = parse_datetime(bounds.get("start"))
    end = parse_datetime(bounds.get("end"))
    if start is None and end is None:
        return True
    parsed = parse_datetime(cell)
    if parsed is None:
        return False
    moment = parsed[0]
    if start is not None and moment < start[0]:
        return False
    if end is not None:
        end_moment, end_date_only = end
        # A bare end date covers the whole of that day
        if end_date_only:
            return moment < end_moment + timedelta(days=1)
        return moment <= end_moment
    return True


_MATCHERS = {
    "text": _match_text,
    "select": _match_select,
    "number_range": _match_number_range,
    "date_range": _match_date_range,
}


def filter_rows(
    rows: Iterable[Row],
    filter_values: Mapping[str, Any],
    filter_fields: Sequence[FilterField],
    columns: Sequence[Column] = (),
) -> list[Row]:
    """Keep the rows that satisfy every active filter.

    Parameters
    ----------
    rows : iterable of Row
        Rows to filter.
    filter_values : mapping
        Filter id -> current value. Missing or empty values are inert.
    filter_fields : sequence of FilterField
        Declared filters. Values whose id matches no field are ignored.
    columns : sequence of Column, optional
        Used to resolve a filter's target column to its row key.

    Returns
    -------
    list of Row
        Surviving rows in their original order.
    """
    field_keys = {c.id: c.field_key for c in columns}
    active = []
    for field in filter_fields:
        value = filter_values.get(field.id)
        if is_inert(value):
            continue
        matcher = _MATCHERS.get(field.type)
        if matcher is None:
            debug(f"Filter '{field.id}' has unknown type '{field.type}', passing all rows")
            continue
        active.append((field_keys.get(field.column, field.column), matcher, value))

    if not active:
        return list(rows)

    return [
        row for row in rows if all(matcher(row.get(key), value) for key, matcher, value in active)
    ]


# --- Sort ---


def _sign(number: float) -> int:
    return (number > 0) - (number < 0)


@lru_cache(maxsize=1)
def get_collator() -> Collator:
    """Shared Unicode Collation Algorithm collator (loads its key table once)."""
    return Collator()


@lru_cache(maxsize=4096)
def collation_key(text: str) -> tuple[int, ...]:
    """Multi-level UCA sort key of ``text``."""
    return get_collator().sort_key(text)


def compare_text(a: str, b: str) -> int:
    """Collation-aware string comparison.

    Accents, case and kana type only differ at the secondary and tertiary
    levels, so "éclair" sorts before "fig", "al" before "Bob" and "ア"
    before "い". Strings with equal keys fall back to code point order.
    """
    key_a, key_b = collation_key(a), collation_key(b)
    if key_a != key_b:
        return (key_a > key_b) - (key_a < key_b)
    return (a > b) - (a < b)


def compare_values(a: Any, b: Any) -> int:
    """Ascending comparison of two cell values, None excluded."""
    if _is_number(a) and _is_number(b):
        return _sign(a - b)
    if isinstance(a, str) and isinstance(b, str):
        return compare_text(a, b)
    return compare_text(stringify(a), stringify(b))


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, float) and math.isnan(value))


def sort_rows(
    rows: Iterable[Row],
    sort: SortConfig | None,
    columns: Sequence[Column],
) -> list[Row]:
    """Stable sort of rows by one column.

    Missing values sort last in both directions; ``desc`` reverses the
    comparison of present values only. Rows with equal keys keep their
    relative order.
    """
    result = list(rows)
    if sort is None:
        return result

    column = next((c for c in columns if c.id == sort.column), None)
    if column is None:
        debug(f"Sort column '{sort.column}' not found, leaving order unchanged")
        return result

    key = column.field_key
    descending = sort.direction == "desc"

    def compare(left: Row, right: Row) -> int:
        a = left.get(key)
        b = right.get(key)
        a_missing, b_missing = _is_missing(a), _is_missing(b)
        if a_missing or b_missing:
            return int(a_missing) - int(b_missing)
        if a == b:
            return 0
        comparison = compare_values(a, b)
        return -comparison if descending else comparison

    return sorted(result, key=cmp_to_key(compare))


# --- Paginate ---


def paginate_rows(rows: Sequence[Row], page: int, page_size: int) -> list[Row]:
    """Slice one 0-based page; out-of-range requests yield an empty list."""
    if page < 0 or page_size <= 0:
        return []
    start = page * page_size
    return list(rows[start : start + page_size])


def page_count(total: int, page_size: int) -> int:
    """Number of pages needed for ``total`` rows."""
    if page_size <= 0:
        return 0
    return math.ceil(total / page_size)


def clamp_page(page: int, total: int, page_size: int) -> int:
    """Clamp a page request into ``[0, page_count - 1]`` (0 when empty)."""
    last = page_count(total, page_size) - 1
    return max(0, min(page, last))
