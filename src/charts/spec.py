"""
ChartSpecification -- the declarative description of what to query and how
to map the query results onto a chart.

The persisted form is a plain JSON-compatible structure with camelCase keys
(``{"v": 1, "type": ..., "data": {...}, "encodings": {...}, "options": {...}}``).
Python code accesses the query as ``spec.query``; it is stored under ``data``.

Specifications are immutable by convention: every builder in this package
returns a new value and never touches its input.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

ChartType = Literal["bar", "line", "pie", "table", "scatter"]
TimeUnit = Literal["year", "quarter", "month", "week", "day", "hour", "none"]
Aggregate = Literal["sum", "avg", "min", "max", "count", "countDistinct"]
FilterOp = Literal[
    "eq", "neq", "gt", "gte", "lt", "lte", "in", "notIn",
    "contains", "startsWith", "between", "isNull", "notNull",
]
SortDir = Literal["asc", "desc"]

CHART_TYPES: tuple[str, ...] = ("bar", "line", "pie", "table", "scatter")
SPEC_VERSION = 1


class _SpecModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ── Field references ────────────────────────────────────


class FieldRef(_SpecModel):
    field: str
    label: str | None = None


class MeasureRef(FieldRef):
    aggregate: Aggregate | None = None  # resolved to sum/count at query time
    format: str | None = None


class DimensionRef(FieldRef):
    time_unit: TimeUnit | None = Field(None, alias="timeUnit")
    sort: SortDir | None = None


# ── Query ───────────────────────────────────────────────


class Filter(_SpecModel):
    field: str
    op: FilterOp
    value: Any = None


class OrderBy(_SpecModel):
    field: str
    dir: SortDir = "asc"


class DataQuery(_SpecModel):
    """The aggregation request behind a chart."""

    source: str = ""
    dimensions: list[DimensionRef] = Field(default_factory=list)
    measures: list[MeasureRef] = Field(default_factory=list)
    filters: list[Filter] | None = None
    limit: int | None = None
    order_by: list[OrderBy] | None = Field(None, alias="orderBy")


# ── Encodings & options ─────────────────────────────────


class Encodings(_SpecModel):
    # bar / line / scatter
    x: DimensionRef | None = None
    y: MeasureRef | list[MeasureRef] | None = None
    series: DimensionRef | None = None
    stack: bool | None = None
    smooth: bool | None = None
    # pie
    category: DimensionRef | None = None
    value: MeasureRef | None = None
    # table
    columns: list[FieldRef] | None = None
    # scatter only
    x_value: MeasureRef | None = Field(None, alias="xValue")
    y_value: MeasureRef | None = Field(None, alias="yValue")
    size: MeasureRef | None = None
    # presentation
    color: list[str] | None = None
    label: bool | None = None


class ChartOptions(_SpecModel):
    title: str | None = None
    subtitle: str | None = None
    legend: Literal["none", "top", "right", "bottom", "left"] | None = None
    y_axis_format: str | None = Field(None, alias="yAxisFormat")
    x_axis_tick_format: str | None = Field(None, alias="xAxisTickFormat")
    tooltip_fields: list[FieldRef] | None = Field(None, alias="tooltipFields")
    height: int | None = None
    sample_top_n_series: int | None = Field(None, alias="sampleTopNSeries")
    column_order: list[str] | None = Field(None, alias="columnOrder")


class ChartSpecification(_SpecModel):
    """Root chart entity (spec version 1)."""

    v: Literal[1] = SPEC_VERSION
    type: ChartType = "bar"
    query: DataQuery = Field(default_factory=DataQuery, alias="data")
    encodings: Encodings = Field(default_factory=Encodings)
    options: ChartOptions | None = None


# ── Slots & fields handed over by the UI ────────────────


class Slot(str, Enum):
    """Encoding slot a field can be dropped onto."""

    X = "x"
    Y = "y"
    SERIES = "series"
    CATEGORY = "category"
    VALUE = "value"
    COLUMNS = "columns"


class FieldDescriptor(_SpecModel):
    """A column picked from the schema browser."""

    name: str
    type: str = ""
    table: str = ""


# ── Construction & serialisation ────────────────────────


def new_spec(
    chart_type: ChartType = "bar",
    title: str | None = "New Chart",
    height: int | None = 300,
) -> ChartSpecification:
    """Return an empty specification: no source, no fields, no encodings."""
    return ChartSpecification(
        type=chart_type,
        query=DataQuery(),
        encodings=Encodings(),
        options=ChartOptions(title=title, height=height),
    )


def spec_to_dict(spec: ChartSpecification) -> dict[str, Any]:
    """Serialise to the persisted JSON-compatible form (unset keys omitted)."""
    return spec.model_dump(mode="json", by_alias=True, exclude_none=True)


def spec_from_dict(data: dict[str, Any]) -> ChartSpecification:
    """Parse the persisted form. Raises ``pydantic.ValidationError`` on bad input."""
    return ChartSpecification.model_validate(data)
