"""
Unit tests -- ChartSpecification model & serialisation.
"""
import pytest
from pydantic import ValidationError

from src.charts.spec import (
    ChartSpecification,
    DataQuery,
    DimensionRef,
    Encodings,
    MeasureRef,
    Slot,
    new_spec,
    spec_from_dict,
    spec_to_dict,
)


def _full_spec_dict():
    return {
        "v": 1,
        "type": "line",
        "data": {
            "source": "sales_revenue",
            "dimensions": [{"field": "month", "timeUnit": "month", "sort": "asc"}, {"field": "lead_source"}],
            "measures": [{"field": "revenue", "aggregate": "sum", "label": "Revenue"}],
            "filters": [{"field": "lead_source", "op": "in", "value": ["Website", "Referral"]}],
            "limit": 100,
            "orderBy": [{"field": "month", "dir": "asc"}],
        },
        "encodings": {
            "x": {"field": "month"},
            "y": {"field": "revenue", "aggregate": "sum", "label": "Revenue"},
            "series": {"field": "lead_source"},
            "smooth": True,
        },
        "options": {
            "title": "Revenue by Month",
            "legend": "bottom",
            "height": 240,
            "columnOrder": ["month", "revenue"],
            "sampleTopNSeries": 5,
        },
    }


# ── Defaults ────────────────────────────────────────────

def test_new_spec_is_empty():
    spec = new_spec()
    assert spec.v == 1
    assert spec.type == "bar"
    assert spec.query.source == ""
    assert spec.query.dimensions == []
    assert spec.query.measures == []
    assert spec_to_dict(spec)["encodings"] == {}
    assert spec.options.title == "New Chart"
    assert spec.options.height == 300


def test_new_spec_with_type():
    spec = new_spec("table", title=None, height=None)
    assert spec.type == "table"
    assert "options" in spec_to_dict(spec)
    assert spec_to_dict(spec)["options"] == {}


# ── Parsing ─────────────────────────────────────────────

def test_parse_camel_case_keys():
    spec = spec_from_dict(_full_spec_dict())
    assert spec.query.source == "sales_revenue"
    assert spec.query.dimensions[0].time_unit == "month"
    assert spec.query.order_by[0].field == "month"
    assert spec.options.column_order == ["month", "revenue"]
    assert spec.options.sample_top_n_series == 5
    assert isinstance(spec.encodings.y, MeasureRef)
    assert spec.encodings.smooth is True


def test_y_accepts_list_of_measures():
    data = _full_spec_dict()
    data["encodings"]["y"] = [{"field": "revenue"}, {"field": "cost"}]
    spec = spec_from_dict(data)
    assert isinstance(spec.encodings.y, list)
    assert [m.field for m in spec.encodings.y] == ["revenue", "cost"]


def test_python_names_accepted():
    spec = ChartSpecification(
        type="pie",
        query=DataQuery(source="ar_aging"),
        encodings=Encodings(category=DimensionRef(field="aging_bucket")),
    )
    assert spec_to_dict(spec)["data"]["source"] == "ar_aging"


def test_unknown_chart_type_rejected():
    data = _full_spec_dict()
    data["type"] = "radar"
    with pytest.raises(ValidationError):
        spec_from_dict(data)


def test_only_version_one_accepted():
    data = _full_spec_dict()
    data["v"] = 2
    with pytest.raises(ValidationError):
        spec_from_dict(data)


# ── Round-trip ──────────────────────────────────────────

def test_round_trip_is_lossless():
    original = spec_from_dict(_full_spec_dict())
    restored = spec_from_dict(spec_to_dict(original))
    assert restored == original
    assert spec_to_dict(restored) == spec_to_dict(original)


def test_serialised_form_matches_input():
    data = _full_spec_dict()
    assert spec_to_dict(spec_from_dict(data)) == data


def test_unset_keys_are_omitted():
    d = spec_to_dict(new_spec())
    assert "filters" not in d["data"]
    assert "limit" not in d["data"]
    assert "orderBy" not in d["data"]


# ── Slots ───────────────────────────────────────────────

def test_slot_values_are_encoding_keys():
    assert [s.value for s in Slot] == ["x", "y", "series", "category", "value", "columns"]
    assert Slot("category") is Slot.CATEGORY
