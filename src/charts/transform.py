"""
Row transformer -- reshapes query result rows into what a chart renders.

Given a finalised ``ChartSpecification`` and the flat rows returned by the
data source, ``transform_rows`` produces:

  - chart_data   records to plot
  - series_keys  keys of the plotted series
  - x_key        key of the category / x axis
  - value_key    key of the primary value

Branches on chart type:

  - scatter  raw points, rows passed through untouched
  - pie      one {category, value} record per row, missing values -> 0
  - table    rows passed through untouched
  - bar/line pivot on the series field when one is encoded, otherwise one
             {x, value} record per row

The transformer never raises: absent encodings resolve to ``None`` keys and
absent values to ``0`` so that a half-built chart still renders.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from src.charts.spec import ChartSpecification, FieldRef, MeasureRef
from src.core.logging import get_logger

logger = get_logger(__name__)

Row = dict[Any, Any]


@dataclass
class TransformResult:
    """Renderer-ready chart data."""
    chart_data: list[Row]
    series_keys: list[Any] = field(default_factory=list)
    x_key: str | None = None
    value_key: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "chartData": self.chart_data,
            "seriesKeys": self.series_keys,
            "xKey": self.x_key,
            "valueKey": self.value_key,
        }


# ── Helpers ─────────────────────────────────────────────


def _coalesce(*values: Any) -> Any:
    """First value that is not None (``??`` chain)."""
    for value in values:
        if value is not None:
            return value
    return None


def _field_of(ref: FieldRef | None) -> str | None:
    return ref.field if ref is not None else None


def _first_dimension(spec: ChartSpecification) -> str | None:
    dims = spec.query.dimensions
    return dims[0].field if dims else None


def _first_measure(spec: ChartSpecification) -> str | None:
    measures = spec.query.measures
    return measures[0].field if measures else None


def _primary_y(spec: ChartSpecification) -> MeasureRef | None:
    y = spec.encodings.y
    if isinstance(y, list):
        return y[0] if y else None
    return y


# ── Branches ────────────────────────────────────────────


def _scatter(spec: ChartSpecification, rows: list[Row]) -> TransformResult:
    enc = spec.encodings
    return TransformResult(
        chart_data=rows,
        series_keys=[],
        x_key=_coalesce(_field_of(enc.x), _field_of(enc.x_value)),
        value_key=_coalesce(_field_of(_primary_y(spec)), _field_of(enc.y_value)),
    )


def _pie(spec: ChartSpecification, rows: list[Row]) -> TransformResult:
    category = _coalesce(_field_of(spec.encodings.category), _first_dimension(spec))
    value = _coalesce(_field_of(spec.encodings.value), _first_measure(spec))
    chart_data = [
        {category: row.get(category), value: _coalesce(row.get(value), 0)}
        for row in rows
    ]
    return TransformResult(chart_data=chart_data, series_keys=[value], x_key=category, value_key=value)


def _group_key(value: Any) -> str:
    """Text key for an x value, written the way a JSON client would print it.

    ``1`` and ``1.0`` land in the same bucket; booleans print lower-case.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _pivot(rows: list[Row], x: str | None, series: str, value_key: str, measure: str | None) -> tuple[list[Row], list[Any]]:
    """One record per distinct x value, one column per series value.

    Records keep first-seen x order; a later row for the same (x, series)
    pair overwrites the earlier value.
    """
    grouped: dict[str, Row] = {}
    for row in rows:
        key = _group_key(row.get(x))
        if key not in grouped:
            grouped[key] = {x: row.get(x)}
        grouped[key][row.get(series)] = _coalesce(row.get(value_key), row.get(measure), 0)
    series_keys = list(dict.fromkeys(row.get(series) for row in rows))
    return list(grouped.values()), series_keys


def transform_rows(spec: ChartSpecification, rows: list[Row]) -> TransformResult:
    """Reshape *rows* for the chart described by *spec*. Never mutates either."""
    if spec.type == "scatter":
        return _scatter(spec, rows)
    if spec.type == "pie":
        return _pie(spec, rows)

    x = _coalesce(_field_of(spec.encodings.x), _first_dimension(spec))
    series = _field_of(spec.encodings.series)
    measure = _primary_y(spec)
    value_key = _coalesce(
        measure.label if measure else None,
        measure.field if measure else None,
        "value",
    )
    measure_field = measure.field if measure else None

    if spec.type == "table":
        # Rendering derives its own column list from the row keys.
        return TransformResult(chart_data=rows, series_keys=[], x_key=x, value_key=value_key)

    if series:
        chart_data, series_keys = _pivot(rows, x, series, value_key, measure_field)
        logger.debug("Pivoted %d rows into %d x %d", len(rows), len(chart_data), len(series_keys))
        return TransformResult(chart_data=chart_data, series_keys=series_keys, x_key=x, value_key=value_key)

    chart_data = [
        {x: row.get(x), value_key: _coalesce(row.get(value_key), row.get(measure_field), 0)}
        for row in rows
    ]
    return TransformResult(chart_data=chart_data, series_keys=[value_key], x_key=x, value_key=value_key)
