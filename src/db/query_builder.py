"""
Query builder -- compiles a chart's ``DataQuery`` into a SQLAlchemy Core SELECT.

The builder composes expressions from the structured query only; it never
parses or concatenates SQL text.

  SELECT  <dimensions, time-bucketed>  <measures, aggregated>
  FROM    <source>
  WHERE   <filters>
  GROUP BY <dimensions>          (only when measures are requested)
  ORDER BY <orderBy>, <dimension sort>
  LIMIT   min(query.limit, row limit)
"""
from __future__ import annotations

from typing import Any

from sqlalchemy import Integer, String, cast, column, distinct, func, literal_column, select, table
from sqlalchemy.sql import Select
from sqlalchemy.sql.elements import ColumnElement

from src.catalog.schema_loader import SchemaCatalog
from src.charts.fields import is_numeric_type
from src.charts.spec import DataQuery, DimensionRef, Filter, MeasureRef
from src.core.logging import get_logger

logger = get_logger(__name__)


class QueryBuildError(ValueError):
    """The chart query cannot be turned into SQL (missing source, bad filter...)."""


# ── Time bucketing ──────────────────────────────────────

_SQLITE_FORMATS = {
    "year": "%Y",
    "month": "%Y-%m",
    "week": "%Y-W%W",
    "day": "%Y-%m-%d",
    "hour": "%Y-%m-%d %H:00",
}


def _const(value: str) -> ColumnElement:
    # Inlined so SELECT and GROUP BY render the identical expression.
    return literal_column(f"'{value}'")


def _time_bucket(col: ColumnElement, unit: str | None, dialect_name: str) -> ColumnElement:
    if not unit or unit == "none":
        return col
    if dialect_name != "sqlite":
        return func.date_trunc(_const(unit), col)
    if unit == "quarter":
        quarter = (cast(func.strftime(_const("%m"), col), Integer) + 2) // 3
        return func.strftime(_const("%Y"), col).concat("-Q").concat(cast(quarter, String))
    return func.strftime(_const(_SQLITE_FORMATS[unit]), col)


def _dimension_expr(dim: DimensionRef, dialect_name: str) -> ColumnElement:
    return _time_bucket(column(dim.field), dim.time_unit, dialect_name)


# ── Aggregation ─────────────────────────────────────────

def resolve_aggregate(measure: MeasureRef, column_type: str | None) -> str:
    """Explicit aggregate, else ``sum`` for numeric-looking columns and ``count`` otherwise."""
    if measure.aggregate:
        return measure.aggregate
    return "sum" if is_numeric_type(column_type) else "count"


def _measure_expr(measure: MeasureRef, aggregate: str) -> ColumnElement:
    col = column(measure.field)
    if aggregate == "sum":
        return func.sum(col)
    if aggregate == "avg":
        return func.avg(col)
    if aggregate == "min":
        return func.min(col)
    if aggregate == "max":
        return func.max(col)
    if aggregate == "count":
        return func.count(col)
    if aggregate == "countDistinct":
        return func.count(distinct(col))
    raise QueryBuildError(f"Unknown aggregate '{aggregate}'")


# ── Filters ─────────────────────────────────────────────

def _as_list(value: Any) -> list[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _filter_expr(flt: Filter) -> ColumnElement:
    col = column(flt.field)
    op, value = flt.op, flt.value
    if op == "eq":
        return col == value
    if op == "neq":
        return col != value
    if op == "gt":
        return col > value
    if op == "gte":
        return col >= value
    if op == "lt":
        return col < value
    if op == "lte":
        return col <= value
    if op == "in":
        return col.in_(_as_list(value))
    if op == "notIn":
        return col.not_in(_as_list(value))
    if op == "contains":
        return col.contains(str(value), autoescape=True)
    if op == "startsWith":
        return col.startswith(str(value), autoescape=True)
    if op == "between":
        bounds = _as_list(value)
        if len(bounds) != 2:
            raise QueryBuildError(f"Filter '{flt.field}' between needs exactly two values")
        return col.between(bounds[0], bounds[1])
    if op == "isNull":
        return col.is_(None)
    if op == "notNull":
        return col.is_not(None)
    raise QueryBuildError(f"Unknown filter operator '{op}'")


# ── Builder ─────────────────────────────────────────────

def _effective_limit(query_limit: int | None, row_limit: int | None) -> int | None:
    limits = [n for n in (query_limit, row_limit) if n is not None and n > 0]
    return min(limits) if limits else None


def build_select(
    query: DataQuery,
    dialect_name: str = "postgresql",
    row_limit: int | None = None,
    catalog: SchemaCatalog | None = None,
) -> Select:
    """Compile *query* into a SELECT statement for *dialect_name*.

    Raises
    ------
    QueryBuildError
        If the query has no source, selects nothing, or carries an invalid filter.
    """
    if not query.source:
        raise QueryBuildError("Chart query has no source table")
    if not query.dimensions and not query.measures:
        raise QueryBuildError("Chart query selects no fields")

    schema, _, name = query.source.rpartition(".")
    source = table(name, schema=schema or None)

    dim_exprs = [_dimension_expr(d, dialect_name) for d in query.dimensions]
    select_parts: list[ColumnElement] = [
        expr.label(d.field) for expr, d in zip(dim_exprs, query.dimensions)
    ]
    for m in query.measures:
        column_type = catalog.column_type(query.source, m.field) if catalog else None
        aggregate = resolve_aggregate(m, column_type)
        select_parts.append(_measure_expr(m, aggregate).label(m.field))

    stmt = select(*select_parts).select_from(source)

    for flt in query.filters or []:
        stmt = stmt.where(_filter_expr(flt))

    if query.measures and dim_exprs:
        stmt = stmt.group_by(*dim_exprs)

    ordered: set[str] = set()
    for ob in query.order_by or []:
        col = column(ob.field)
        stmt = stmt.order_by(col.desc() if ob.dir == "desc" else col.asc())
        ordered.add(ob.field)
    for d in query.dimensions:
        if d.sort and d.field not in ordered:
            col = column(d.field)
            stmt = stmt.order_by(col.desc() if d.sort == "desc" else col.asc())

    limit = _effective_limit(query.limit, row_limit)
    if limit is not None:
        stmt = stmt.limit(limit)

    logger.debug("Built SELECT for source=%s dims=%d measures=%d", query.source,
                 len(query.dimensions), len(query.measures))
    return stmt
