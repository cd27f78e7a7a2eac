"""
Read-only chart query executor.

Every chart query runs through `execute_query`, which:
  1. Checks the query against the schema catalog
  2. Compiles the chart's DataQuery into a SELECT (no raw SQL text)
  3. Opens a READ ONLY transaction (Postgres-enforced)
  4. Enforces a per-query timeout (statement_timeout on Postgres)
  5. Converts Decimal/date/datetime to JSON-safe Python types
"""
from __future__ import annotations

import decimal
import datetime
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from src.catalog.schema_loader import SchemaCatalog, load_catalog
from src.catalog.validator import validate_query
from src.charts.spec import DataQuery
from src.core.config import get_settings
from src.core.logging import get_logger
from src.core.utils import timer
from src.db.connection import get_engine, readonly_connection
from src.db.query_builder import QueryBuildError, build_select

logger = get_logger(__name__)


class QueryExecutionError(RuntimeError):
    """The data source rejected or failed a chart query."""


@dataclass
class ChartExecutionResult:
    rows: list[dict[str, Any]] = field(default_factory=list)
    duration_ms: int = 0

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def to_dict(self) -> dict[str, Any]:
        return {
            "rows": self.rows,
            "meta": {"rowCount": self.row_count, "durationMs": self.duration_ms},
        }


def _serialise_value(val: Any) -> Any:
    """Convert DB types to JSON-serialisable Python types."""
    if isinstance(val, decimal.Decimal):
        return float(val)
    if isinstance(val, (datetime.date, datetime.datetime)):
        return val.isoformat()
    if isinstance(val, datetime.timedelta):
        return str(val)
    return val


def execute_query(
    query: DataQuery,
    engine: Engine | None = None,
    catalog: SchemaCatalog | None = None,
    row_limit: int | None = None,
    timeout_ms: int | None = None,
) -> ChartExecutionResult:
    """Run a chart query and return its rows as serialisable dicts.

    Raises
    ------
    QueryBuildError
        If the query reaches outside the catalog or cannot be compiled.
    QueryExecutionError
        If the database fails the query.
    """
    settings = get_settings()
    engine = engine or get_engine()
    row_limit = settings.sql_row_limit if row_limit is None else row_limit
    timeout_ms = settings.query_timeout_ms if timeout_ms is None else timeout_ms
    catalog = catalog if catalog is not None else load_catalog()

    errors = validate_query(query, catalog)
    if errors:
        logger.warning("Chart query rejected  source=%s errors=%s", query.source, errors)
        raise QueryBuildError("; ".join(errors))

    stmt = build_select(query, engine.dialect.name, row_limit=row_limit, catalog=catalog)
    logger.info("Executing chart query  source=%s", query.source)

    with timer() as t:
        try:
            with readonly_connection(engine) as conn:
                if engine.dialect.name == "postgresql":
                    conn.execute(text(f"SET LOCAL statement_timeout = {int(timeout_ms)}"))
                result = conn.execute(stmt)
                columns = list(result.keys())
                rows = [
                    {col: _serialise_value(val) for col, val in zip(columns, row)}
                    for row in result.fetchall()
                ]
        except SQLAlchemyError as exc:
            logger.exception("Chart query failed  source=%s", query.source)
            raise QueryExecutionError(f"Query on '{query.source}' failed: {exc.__class__.__name__}") from exc

    logger.info("Returned %d rows in %d ms", len(rows), t.elapsed_ms)
    return ChartExecutionResult(rows=rows, duration_ms=t.elapsed_ms)
