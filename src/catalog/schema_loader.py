"""
Loads, parses, and caches the schema catalog YAML into typed objects.

The catalog lists the tables / views a chart can be built on and the
columns each exposes.  Column type names are kept verbatim; the chart
builder classifies them with ``is_numeric_type``.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from functools import lru_cache
from typing import Any

import yaml

from src.charts.spec import FieldDescriptor
from src.core.config import get_settings


# ── Typed domain objects ─────────────────────────────────

@dataclass(frozen=True)
class ColumnMeta:
    name: str
    type: str
    nullable: bool = True
    is_primary_key: bool = False
    referenced_table: str | None = None
    referenced_column: str | None = None

    @property
    def is_foreign_key(self) -> bool:
        return self.referenced_table is not None


@dataclass(frozen=True)
class TableMeta:
    name: str
    type: str  # table | view
    columns: list[ColumnMeta] = field(default_factory=list)

    def column(self, name: str) -> ColumnMeta | None:
        for col in self.columns:
            if col.name == name:
                return col
        return None


@dataclass
class SchemaCatalog:
    """Fully parsed schema catalog."""

    version: int
    tables: dict[str, TableMeta]  # keyed by name

    # ── Convenience look-ups ─────────────────────────

    def table(self, name: str) -> TableMeta | None:
        return self.tables.get(name)

    def table_names(self) -> list[str]:
        return list(self.tables.keys())

    def field(self, table: str, column: str) -> FieldDescriptor | None:
        """Field descriptor for *table.column*, as the chart builder consumes it."""
        meta = self.table(table)
        col = meta.column(column) if meta else None
        if col is None:
            return None
        return FieldDescriptor(name=col.name, type=col.type, table=table)

    def fields(self, table: str) -> list[FieldDescriptor]:
        meta = self.table(table)
        if meta is None:
            return []
        return [FieldDescriptor(name=c.name, type=c.type, table=table) for c in meta.columns]

    def column_type(self, table: str, column: str) -> str | None:
        meta = self.table(table)
        col = meta.column(column) if meta else None
        return col.type if col else None

    def to_dict(self) -> dict[str, Any]:
        """Catalog as plain data (for API responses)."""
        return {
            "tables": [
                {
                    "name": t.name,
                    "type": t.type,
                    "columns": [
                        {
                            "name": c.name,
                            "type": c.type,
                            "nullable": c.nullable,
                            "isPrimaryKey": c.is_primary_key,
                            "isForeignKey": c.is_foreign_key,
                            "referencedTable": c.referenced_table,
                            "referencedColumn": c.referenced_column,
                        }
                        for c in t.columns
                    ],
                }
                for t in self.tables.values()
            ]
        }


# ── Parsing ──────────────────────────────────────────────

def _parse_column(raw: dict[str, Any]) -> ColumnMeta:
    ref_table = ref_column = None
    if raw.get("references"):
        ref_table, _, ref_column = str(raw["references"]).partition(".")
    return ColumnMeta(
        name=raw["name"],
        type=str(raw.get("type", "")),
        nullable=raw.get("nullable", True),
        is_primary_key=raw.get("primary_key", False),
        referenced_table=ref_table,
        referenced_column=ref_column or None,
    )


def _parse_table(raw: dict[str, Any]) -> TableMeta:
    return TableMeta(
        name=raw["name"],
        type=raw.get("type", "table"),
        columns=[_parse_column(c) for c in raw.get("columns") or []],
    )


def parse_catalog(raw_yaml: dict[str, Any]) -> SchemaCatalog:
    tables = {t["name"]: _parse_table(t) for t in raw_yaml.get("tables", [])}
    return SchemaCatalog(version=raw_yaml.get("version", 1), tables=tables)


# ── Public API ───────────────────────────────────────────

@lru_cache
def load_catalog(path: str | None = None) -> SchemaCatalog:
    """Load and cache the schema catalog from YAML."""
    catalog_path = Path(path or get_settings().catalog_path)
    with open(catalog_path) as f:
        raw = yaml.safe_load(f)
    return parse_catalog(raw or {})
