"""
Spec mutators -- attach / detach a field to / from an encoding slot.

Every function takes a specification and returns a *new* one.  The
dimension / measure lists of the query are kept in step with the encodings:
a field dropped on a grouping slot becomes a dimension, a field dropped on a
value slot becomes a measure, and removing the last slot that references a
field removes it from the query again.

Nothing here raises for odd field/slot combinations; downstream consumers
(the type-transition validator and the row transformer) cope with whatever
state an in-progress edit leaves behind.
"""
from __future__ import annotations

from src.charts.fields import is_numeric_type
from src.charts.spec import (
    Aggregate,
    ChartSpecification,
    DimensionRef,
    Encodings,
    FieldDescriptor,
    FieldRef,
    MeasureRef,
    Slot,
)

DEFAULT_AGGREGATE: Aggregate = "sum"


# ── Query helpers ───────────────────────────────────────


def _clone(spec: ChartSpecification) -> ChartSpecification:
    return spec.model_copy(deep=True)


def _claim_source(spec: ChartSpecification, field: FieldDescriptor) -> None:
    # The first field assigned decides which table the chart reads from.
    if not spec.query.source:
        spec.query.source = field.table


def _add_dimension(spec: ChartSpecification, name: str) -> None:
    if not any(d.field == name for d in spec.query.dimensions):
        spec.query.dimensions.append(DimensionRef(field=name))


def _add_measure(spec: ChartSpecification, name: str, aggregate: Aggregate = DEFAULT_AGGREGATE) -> None:
    if not any(m.field == name for m in spec.query.measures):
        spec.query.measures.append(MeasureRef(field=name, aggregate=aggregate, label=name))


def _drop_from_query(spec: ChartSpecification, name: str) -> None:
    spec.query.dimensions = [d for d in spec.query.dimensions if d.field != name]
    spec.query.measures = [m for m in spec.query.measures if m.field != name]


# ── Encoding inspection ─────────────────────────────────


def slot_fields(encodings: Encodings, slot: Slot) -> list[str]:
    """Field names currently held by *slot* (empty when the slot is unset)."""
    if slot is Slot.X:
        return [encodings.x.field] if encodings.x else []
    if slot is Slot.Y:
        if encodings.y is None:
            return []
        if isinstance(encodings.y, list):
            return [m.field for m in encodings.y]
        return [encodings.y.field]
    if slot is Slot.SERIES:
        return [encodings.series.field] if encodings.series else []
    if slot is Slot.CATEGORY:
        return [encodings.category.field] if encodings.category else []
    if slot is Slot.VALUE:
        return [encodings.value.field] if encodings.value else []
    # Slot.COLUMNS
    return [c.field for c in encodings.columns or []]


def referenced_fields(encodings: Encodings) -> set[str]:
    """Every field name referenced by any encoding slot, scatter aliases included."""
    names: set[str] = set()
    for slot in Slot:
        names.update(slot_fields(encodings, slot))
    for ref in (encodings.x_value, encodings.y_value, encodings.size):
        if ref is not None:
            names.add(ref.field)
    return names


# ── Mutators ────────────────────────────────────────────


def assign_to_axis(spec: ChartSpecification, field: FieldDescriptor, slot: Slot | str) -> ChartSpecification:
    """Put *field* on a single-value slot (x, y, series, category, value)."""
    slot = Slot(slot)
    if slot is Slot.COLUMNS:
        return assign_to_columns(spec, field)

    new_spec = _clone(spec)
    _claim_source(new_spec, field)
    numeric = is_numeric_type(field.type)
    enc = new_spec.encodings

    if slot is Slot.X:
        enc.x = DimensionRef(field=field.name)
        if not numeric:
            _add_dimension(new_spec, field.name)
        elif new_spec.type == "scatter":
            # A numeric scatter X is itself an aggregated value, not a grouping key
            _add_measure(new_spec, field.name)
    elif slot is Slot.Y:
        enc.y = MeasureRef(field=field.name)
        _add_measure(new_spec, field.name)
    elif slot is Slot.SERIES:
        enc.series = DimensionRef(field=field.name)
        _add_dimension(new_spec, field.name)
    elif slot is Slot.CATEGORY:
        enc.category = DimensionRef(field=field.name)
        if not numeric:
            _add_dimension(new_spec, field.name)
    elif slot is Slot.VALUE:
        enc.value = MeasureRef(field=field.name)
        _add_measure(new_spec, field.name)

    return new_spec


def assign_to_columns(spec: ChartSpecification, field: FieldDescriptor) -> ChartSpecification:
    """Append *field* to the table's column list (no-op when already there)."""
    new_spec = _clone(spec)
    _claim_source(new_spec, field)
    columns = list(new_spec.encodings.columns or [])
    if not any(c.field == field.name for c in columns):
        columns.append(FieldRef(field=field.name))
        if is_numeric_type(field.type):
            _add_measure(new_spec, field.name)
        else:
            _add_dimension(new_spec, field.name)
    new_spec.encodings.columns = columns
    return new_spec


def unassign(spec: ChartSpecification, slot: Slot | str) -> ChartSpecification:
    """Clear *slot*; drop its field(s) from the query unless another slot still uses them."""
    slot = Slot(slot)
    new_spec = _clone(spec)
    held = slot_fields(new_spec.encodings, slot)
    if not held:
        return new_spec

    setattr(new_spec.encodings, slot.value, None)
    still_used = referenced_fields(new_spec.encodings)
    for name in held:
        if name not in still_used:
            _drop_from_query(new_spec, name)
    return new_spec


def unassign_column(spec: ChartSpecification, field: FieldDescriptor | str) -> ChartSpecification:
    """Remove one column from a table spec.

    Unlike ``unassign`` the field always leaves both dimensions and measures,
    even when another slot still references it.
    """
    name = field if isinstance(field, str) else field.name
    new_spec = _clone(spec)
    columns = [c for c in new_spec.encodings.columns or [] if c.field != name]
    new_spec.encodings.columns = columns or None
    _drop_from_query(new_spec, name)
    return new_spec
