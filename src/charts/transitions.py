"""
Chart-type transitions.

Switching chart type keeps the encodings that make sense for the new chart
family, remaps the compatible ones (``x`` <-> ``category``, ``y`` <->
``value``) and drops the rest.  The rule depends only on the target type, so
the same spec switched to the same type always yields the same result no
matter which type it came from.

Cleanup of the query is narrow: only the ``x`` field dropped on
the way to ``scatter`` is removed from ``dimensions``.  Other dropped slots
(for instance pie's ``series``) leave their dimension / measure entries in
place.
"""
from __future__ import annotations

from src.charts.spec import ChartSpecification, ChartType, Encodings
from src.core.logging import get_logger

logger = get_logger(__name__)

# Slot vocabulary of each chart family (serialised key names).
VALID_SLOTS: dict[str, frozenset[str]] = {
    "bar": frozenset({"x", "y", "series", "stack", "smooth", "color", "label"}),
    "line": frozenset({"x", "y", "series", "stack", "smooth", "color", "label"}),
    "pie": frozenset({"category", "value", "color", "label"}),
    "table": frozenset({"columns"}),
    "scatter": frozenset({"x", "y", "series", "xValue", "yValue", "size", "color", "label"}),
}


def present_slots(encodings: Encodings) -> set[str]:
    """Serialised names of the encoding slots that are currently set."""
    return set(encodings.model_dump(by_alias=True, exclude_none=True))


def _fallback(value, default):
    # An empty list is still a set slot.
    return value if value is not None else default


def _pie(old: Encodings) -> Encodings:
    return Encodings(
        category=_fallback(old.x, old.category),
        value=_first_measure(old.y) if old.y is not None else old.value,
        color=old.color,
        label=old.label,
    )


def _scatter(old: Encodings) -> Encodings:
    # The old X was a grouping key; it does not carry over to a numeric axis.
    return Encodings(
        x=None,
        y=_fallback(old.y, old.value),
        series=old.series,
        x_value=old.x_value,
        y_value=old.y_value,
        size=old.size,
        color=old.color,
        label=old.label,
    )


def _cartesian(old: Encodings) -> Encodings:
    return Encodings(
        x=_fallback(old.category, old.x),
        y=_fallback(old.value, old.y),
        series=old.series,
        stack=old.stack,
        smooth=old.smooth,
        color=old.color,
        label=old.label,
    )


def _first_measure(y):
    if isinstance(y, list):
        return y[0] if y else None
    return y


def change_chart_type(spec: ChartSpecification, target: ChartType) -> ChartSpecification:
    """Return a copy of *spec* retargeted to *target* with compatible encodings only."""
    new_spec = spec.model_copy(deep=True)
    new_spec.type = target
    old = new_spec.encodings

    if target == "pie":
        new_spec.encodings = _pie(old)
    elif target == "table":
        # Column assignment is a separate, later user action.
        new_spec.encodings = Encodings()
    elif target == "scatter":
        new_spec.encodings = _scatter(old)
        if old.x is not None:
            dropped = old.x.field
            new_spec.query.dimensions = [d for d in new_spec.query.dimensions if d.field != dropped]
    else:  # bar / line
        new_spec.encodings = _cartesian(old)

    logger.debug(
        "Chart type %s -> %s  slots=%s",
        spec.type, target, sorted(present_slots(new_spec.encodings)),
    )
    return new_spec
