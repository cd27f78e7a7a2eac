"""
Table presentation helpers: column order and header-click sorting.
"""
from __future__ import annotations

from functools import cmp_to_key
from typing import Any, Literal

from src.charts.spec import ChartSpecification

SortDirection = Literal["asc", "desc"]


def table_columns(spec: ChartSpecification, chart_data: list[dict[str, Any]]) -> list[str]:
    """Column keys of the first record, re-ordered by ``options.columnOrder``.

    Columns named in the persisted order come first, in that order; the rest
    follow in row order.  Names that are not in the data are ignored.
    """
    if not chart_data:
        return []
    columns = list(chart_data[0].keys())
    order = spec.options.column_order if spec.options else None
    if not order:
        return columns
    known = set(columns)
    ordered = [c for c in dict.fromkeys(order) if c in known]
    return ordered + [c for c in columns if c not in ordered]


def _compare(a: Any, b: Any) -> int:
    if isinstance(a, (int, float)) and isinstance(b, (int, float)) and not isinstance(a, bool) and not isinstance(b, bool):
        return (a > b) - (a < b)
    # Case-insensitive first, like a locale-aware compare; raw text breaks ties.
    sa, sb = str(a), str(b)
    ka, kb = (sa.casefold(), sa), (sb.casefold(), sb)
    return (ka > kb) - (ka < kb)


def sort_table_rows(
    rows: list[dict[str, Any]],
    column: str | None,
    direction: SortDirection | None,
) -> list[dict[str, Any]]:
    """Return rows sorted by *column*; missing values go last ascending, first descending."""
    if not column or direction is None:
        return rows

    present = [r for r in rows if r.get(column) is not None]
    missing = [r for r in rows if r.get(column) is None]

    ordered = sorted(
        present,
        key=cmp_to_key(lambda a, b: _compare(a[column], b[column])),
        reverse=direction == "desc",
    )
    if direction == "asc":
        return ordered + missing
    return missing + ordered


def next_sort_state(
    current_column: str | None,
    current_direction: SortDirection | None,
    clicked: str,
) -> tuple[str | None, SortDirection | None]:
    """Header click cycle: new column -> asc -> desc -> unsorted."""
    if current_column != clicked:
        return clicked, "asc"
    if current_direction == "asc":
        return clicked, "desc"
    if current_direction == "desc":
        return None, None
    return clicked, "asc"
