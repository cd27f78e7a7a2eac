"""
Drop shelves -- which slots a chart type offers and which field types each accepts.
"""
from __future__ import annotations

from dataclasses import dataclass

from src.charts.fields import DataType, field_data_type
from src.charts.mutators import assign_to_axis, assign_to_columns, slot_fields
from src.charts.spec import ChartSpecification, FieldDescriptor, Slot


@dataclass(frozen=True)
class Shelf:
    id: str
    label: str
    slot: Slot
    accepts: tuple[DataType, ...]
    max_items: int | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "encoding": self.slot.value,
            "accepts": list(self.accepts),
            "maxItems": self.max_items,
        }


_CARTESIAN = (
    Shelf("x-axis", "X-Axis", Slot.X, ("string", "date"), 1),
    Shelf("y-axis", "Y-Axis", Slot.Y, ("number",), 1),
    Shelf("series", "Series", Slot.SERIES, ("string",), 1),
)

_SHELVES: dict[str, tuple[Shelf, ...]] = {
    "bar": _CARTESIAN,
    "line": _CARTESIAN,
    "pie": (
        Shelf("category", "Category", Slot.CATEGORY, ("string", "date")),
        Shelf("value", "Value", Slot.VALUE, ("number",), 1),
    ),
    "table": (
        Shelf("columns", "Columns", Slot.COLUMNS, ("string", "number", "date"), 10),
    ),
    "scatter": (
        Shelf("x-axis", "X-Axis (Numeric)", Slot.X, ("number",), 1),
        Shelf("y-axis", "Y-Axis (Numeric)", Slot.Y, ("number",), 1),
        Shelf("series", "Color By", Slot.SERIES, ("string",), 1),
    ),
}


def shelves_for(chart_type: str) -> tuple[Shelf, ...]:
    """Shelves offered by *chart_type* (bar/line layout for unknown types)."""
    return _SHELVES.get(chart_type, _CARTESIAN)


def find_shelf(chart_type: str, shelf_id: str) -> Shelf | None:
    for shelf in shelves_for(chart_type):
        if shelf.id == shelf_id:
            return shelf
    return None


def check_drop(spec: ChartSpecification, field: FieldDescriptor, shelf: Shelf) -> str | None:
    """Return a user-facing rejection message, or ``None`` when the drop is allowed."""
    if field_data_type(field.type) not in shelf.accepts:
        return f"Cannot drop {field.type} field into {shelf.label}"
    if shelf.slot is Slot.COLUMNS and shelf.max_items is not None:
        held = slot_fields(spec.encodings, Slot.COLUMNS)
        if field.name not in held and len(held) >= shelf.max_items:
            return f"{shelf.label} holds at most {shelf.max_items} fields"
    return None


def drop_field(spec: ChartSpecification, field: FieldDescriptor, shelf: Shelf) -> ChartSpecification:
    """Apply a drop that ``check_drop`` accepted."""
    if shelf.slot is Slot.COLUMNS:
        return assign_to_columns(spec, field)
    return assign_to_axis(spec, field, shelf.slot)
