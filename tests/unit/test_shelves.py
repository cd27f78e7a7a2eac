"""
Unit tests -- drop shelves per chart type.
"""
from src.charts.shelves import check_drop, drop_field, find_shelf, shelves_for
from src.charts.spec import FieldDescriptor, Slot, new_spec

TEXT = FieldDescriptor(name="region", type="VARCHAR(50)", table="accounts")
DATE = FieldDescriptor(name="created_at", type="DATE", table="accounts")
NUM = FieldDescriptor(name="annual_revenue", type="DECIMAL(14,2)", table="accounts")


def test_shelf_layouts():
    assert [s.id for s in shelves_for("bar")] == ["x-axis", "y-axis", "series"]
    assert [s.slot for s in shelves_for("pie")] == [Slot.CATEGORY, Slot.VALUE]
    assert [s.slot for s in shelves_for("table")] == [Slot.COLUMNS]
    assert find_shelf("scatter", "series").label == "Color By"
    assert find_shelf("pie", "x-axis") is None


def test_shelf_to_dict():
    d = find_shelf("table", "columns").to_dict()
    assert d["encoding"] == "columns"
    assert d["maxItems"] == 10


def test_type_checks():
    bar = new_spec("bar")
    assert check_drop(bar, TEXT, find_shelf("bar", "x-axis")) is None
    assert check_drop(bar, DATE, find_shelf("bar", "x-axis")) is None
    assert check_drop(bar, NUM, find_shelf("bar", "x-axis")) is not None
    assert check_drop(bar, TEXT, find_shelf("bar", "y-axis")) is not None
    scatter = new_spec("scatter")
    assert check_drop(scatter, NUM, find_shelf("scatter", "x-axis")) is None
    assert check_drop(scatter, TEXT, find_shelf("scatter", "x-axis")) is not None


def test_columns_limit():
    shelf = find_shelf("table", "columns")
    spec = new_spec("table")
    for i in range(10):
        spec = drop_field(spec, FieldDescriptor(name=f"c{i}", type="TEXT", table="t"), shelf)
    assert check_drop(spec, FieldDescriptor(name="c10", type="TEXT", table="t"), shelf) is not None
    assert check_drop(spec, FieldDescriptor(name="c3", type="TEXT", table="t"), shelf) is None


def test_drop_field_assigns_slot():
    spec = drop_field(new_spec("pie"), TEXT, find_shelf("pie", "category"))
    assert spec.encodings.category.field == "region"
    assert spec.query.source == "accounts"
