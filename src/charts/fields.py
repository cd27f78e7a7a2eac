"""
Field type classification.

Column types arrive as free-form database type names (``VARCHAR(255)``,
``DECIMAL(12,2)``, ``TIMESTAMP`` ...).  Every component that needs to know
whether a field is numeric goes through ``is_numeric_type``.
"""
from __future__ import annotations

from typing import Literal

DataType = Literal["number", "date", "string"]

_NUMERIC_MARKERS = ("int", "decimal", "float", "double", "numeric", "number", "real", "money")
_TEMPORAL_MARKERS = ("date", "time")


def is_numeric_type(type_name: str | None) -> bool:
    """Substring heuristic: does the type name look numeric?"""
    if not type_name:
        return False
    lowered = type_name.lower()
    return any(marker in lowered for marker in _NUMERIC_MARKERS)


def field_data_type(type_name: str | None) -> DataType:
    """Map a database type name onto the coarse number/date/string family."""
    if is_numeric_type(type_name):
        return "number"
    lowered = (type_name or "").lower()
    if any(marker in lowered for marker in _TEMPORAL_MARKERS):
        return "date"
    return "string"
