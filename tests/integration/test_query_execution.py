"""
Integration tests -- chart queries executed end-to-end against SQLite.

Builds the SELECT from a chart spec, runs it through the read-only executor
and reshapes the rows the way the dashboard renders them.
"""
from __future__ import annotations

import pytest

from src.catalog.schema_loader import parse_catalog
from src.charts.spec import DataQuery, spec_from_dict
from src.charts.table import sort_table_rows
from src.charts.transform import transform_rows
from src.db.executor import QueryExecutionError, execute_query
from src.db.query_builder import QueryBuildError


def _query(**kwargs) -> DataQuery:
    return DataQuery.model_validate(kwargs)


# ── Aggregation ──────────────────────────────────────────

def test_grouped_sum(sqlite_engine):
    result = execute_query(
        _query(
            source="sales_revenue",
            dimensions=[{"field": "lead_source", "sort": "asc"}],
            measures=[{"field": "revenue", "aggregate": "sum"}],
        ),
        engine=sqlite_engine,
    )
    assert result.rows == [
        {"lead_source": "Events", "revenue": 20},
        {"lead_source": "Referral", "revenue": 80},
        {"lead_source": "Website", "revenue": 170},
    ]
    assert result.row_count == 3
    assert result.to_dict()["meta"]["rowCount"] == 3


def test_count_distinct(sqlite_engine):
    result = execute_query(
        _query(source="deals", dimensions=[{"field": "stage", "sort": "asc"}],
               measures=[{"field": "account_id", "aggregate": "countDistinct"}]),
        engine=sqlite_engine,
    )
    by_stage = {r["stage"]: r["account_id"] for r in result.rows}
    assert by_stage == {"Closed Lost": 1, "Closed Won": 1, "Proposal": 2}


def test_dimensions_only_returns_raw_rows(sqlite_engine):
    result = execute_query(_query(source="top_accounts", dimensions=[{"field": "account_name"}]),
                           engine=sqlite_engine)
    assert sorted(r["account_name"] for r in result.rows) == ["Acme", "Globex", "Initech"]


# ── Time buckets ─────────────────────────────────────────

def test_month_bucket(sqlite_engine):
    result = execute_query(
        _query(source="deals",
               dimensions=[{"field": "created_at", "timeUnit": "month", "sort": "asc"}],
               measures=[{"field": "amount", "aggregate": "sum"}]),
        engine=sqlite_engine,
    )
    assert result.rows == [
        {"created_at": "2024-01", "amount": 5000},
        {"created_at": "2024-04", "amount": 2500},
        {"created_at": "2025-01", "amount": 500},
    ]


def test_year_bucket(sqlite_engine):
    result = execute_query(
        _query(source="deals",
               dimensions=[{"field": "created_at", "timeUnit": "year", "sort": "asc"}],
               measures=[{"field": "amount", "aggregate": "sum"}]),
        engine=sqlite_engine,
    )
    assert result.rows == [{"created_at": "2024", "amount": 7500}, {"created_at": "2025", "amount": 500}]


def test_quarter_bucket(sqlite_engine):
    result = execute_query(
        _query(source="deals",
               dimensions=[{"field": "close_date", "timeUnit": "quarter", "sort": "asc"}],
               measures=[{"field": "amount", "aggregate": "sum"}],
               filters=[{"field": "close_date", "op": "notNull"}]),
        engine=sqlite_engine,
    )
    assert [r["close_date"] for r in result.rows] == ["2024-Q1", "2024-Q2", "2025-Q1"]


# ── Filters & limits ─────────────────────────────────────

def test_filters(sqlite_engine):
    def names(*filters):
        result = execute_query(
            _query(source="deals", dimensions=[{"field": "deal_name", "sort": "asc"}], filters=list(filters)),
            engine=sqlite_engine,
        )
        return [r["deal_name"] for r in result.rows]

    assert names({"field": "stage", "op": "eq", "value": "Proposal"}) == ["Beta", "Gamma"]
    assert names({"field": "stage", "op": "notIn", "value": ["Proposal"]}) == ["Alpha", "Delta Web"]
    assert names({"field": "deal_name", "op": "contains", "value": "Web"}) == ["Delta Web"]
    assert names({"field": "deal_name", "op": "startsWith", "value": "G"}) == ["Gamma"]
    assert names({"field": "amount", "op": "between", "value": [1000, 3000]}) == ["Alpha", "Gamma"]
    assert names({"field": "close_date", "op": "isNull"}) == ["Gamma"]
    assert names(
        {"field": "amount", "op": "gt", "value": 600},
        {"field": "amount", "op": "lt", "value": 4000},
    ) == ["Alpha", "Gamma"]


def test_row_limit_applied(sqlite_engine):
    result = execute_query(_query(source="deals", dimensions=[{"field": "deal_name"}]),
                           engine=sqlite_engine, row_limit=2)
    assert result.row_count == 2


def test_order_by(sqlite_engine):
    result = execute_query(
        _query(source="top_accounts", dimensions=[{"field": "account_name"}],
               measures=[{"field": "revenue_90d", "aggregate": "sum"}],
               orderBy=[{"field": "revenue_90d", "dir": "desc"}], limit=2),
        engine=sqlite_engine,
    )
    assert [r["account_name"] for r in result.rows] == ["Globex", "Acme"]


def test_table_outside_catalog_rejected(sqlite_engine):
    with pytest.raises(QueryBuildError, match="no_such_table"):
        execute_query(_query(source="no_such_table", dimensions=[{"field": "x"}]), engine=sqlite_engine)


def test_sqlite_master_not_readable(sqlite_engine):
    query = _query(source="sqlite_master", dimensions=[{"field": "name"}, {"field": "sql"}])
    with pytest.raises(QueryBuildError, match="sqlite_master"):
        execute_query(query, engine=sqlite_engine)


def test_unknown_column_rejected(sqlite_engine):
    with pytest.raises(QueryBuildError, match="Unknown dimension field 'secret'"):
        execute_query(_query(source="deals", dimensions=[{"field": "secret"}]), engine=sqlite_engine)


def test_catalogued_table_missing_from_database_raises(sqlite_engine):
    catalog = parse_catalog({"tables": [{"name": "no_such_table", "columns": [{"name": "x", "type": "TEXT"}]}]})
    with pytest.raises(QueryExecutionError, match="no_such_table"):
        execute_query(_query(source="no_such_table", dimensions=[{"field": "x"}]),
                      engine=sqlite_engine, catalog=catalog)


# ── Query → chart ────────────────────────────────────────

def test_line_chart_with_series(sqlite_engine):
    spec = spec_from_dict({
        "v": 1, "type": "line",
        "data": {
            "source": "sales_revenue",
            "dimensions": [{"field": "month", "sort": "asc"}, {"field": "lead_source", "sort": "asc"}],
            "measures": [{"field": "revenue", "aggregate": "sum", "label": "Revenue"}],
        },
        "encodings": {
            "x": {"field": "month"},
            "y": {"field": "revenue", "label": "Revenue"},
            "series": {"field": "lead_source"},
        },
    })
    result = execute_query(spec.query, engine=sqlite_engine)
    chart = transform_rows(spec, result.rows)
    assert chart.chart_data == [
        {"month": "2024-01", "Referral": 50, "Website": 100},
        {"month": "2024-02", "Events": 20, "Referral": 30, "Website": 70},
    ]
    assert chart.series_keys == ["Referral", "Website", "Events"]
    assert chart.x_key == "month"


def test_pie_chart(sqlite_engine):
    spec = spec_from_dict({
        "v": 1, "type": "pie",
        "data": {"source": "ar_aging", "dimensions": [{"field": "aging_bucket", "sort": "asc"}],
                 "measures": [{"field": "amount_due", "aggregate": "sum"}]},
        "encodings": {"category": {"field": "aging_bucket"}, "value": {"field": "amount_due"}},
    })
    chart = transform_rows(spec, execute_query(spec.query, engine=sqlite_engine).rows)
    assert chart.chart_data == [
        {"aging_bucket": "0-30 days", "amount_due": 300},
        {"aging_bucket": "31-60 days", "amount_due": 200},
    ]


def test_table_sorted_by_header(sqlite_engine):
    spec = spec_from_dict({
        "v": 1, "type": "table",
        "data": {"source": "top_accounts", "dimensions": [{"field": "account_name"}, {"field": "revenue_90d"}]},
        "encodings": {},
    })
    rows = transform_rows(spec, execute_query(spec.query, engine=sqlite_engine).rows).chart_data
    ordered = sort_table_rows(rows, "revenue_90d", "desc")
    assert [r["account_name"] for r in ordered] == ["Globex", "Acme", "Initech"]
