"""
Validates a chart's DataQuery against the schema catalog.

Checks performed:
  1. The source table / view is listed in the catalog
  2. Every dimension field is a column of the source
  3. Every measure field is a column of the source
  4. Every filter field is a column of the source
  5. Every orderBy field is a column of the source

Anything outside the catalog (system tables, other schemas, typos) is
rejected before SQL is built.
"""
from __future__ import annotations

from src.catalog.schema_loader import SchemaCatalog, load_catalog
from src.charts.spec import DataQuery


def validate_query(query: DataQuery, catalog: SchemaCatalog | None = None) -> list[str]:
    """Return a list of validation error messages (empty list = query is valid).

    Parameters
    ----------
    query : DataQuery
        The chart's aggregation request.
    catalog : SchemaCatalog, optional
        If None, loads the default catalog from disk.
    """
    if catalog is None:
        catalog = load_catalog()

    errors: list[str] = []

    if not query.source:
        return errors  # reported by the query builder

    meta = catalog.table(query.source)
    if meta is None:
        errors.append(
            f"Unknown source table '{query.source}'. "
            f"Allowed: {', '.join(catalog.table_names())}"
        )
        return errors  # can't check columns

    def check(kind: str, field_name: str) -> None:
        if catalog.field(meta.name, field_name) is None:
            errors.append(f"Unknown {kind} field '{field_name}' on '{meta.name}'.")

    for dim in query.dimensions:
        check("dimension", dim.field)
    for measure in query.measures:
        check("measure", measure.field)
    for flt in query.filters or []:
        check("filter", flt.field)
    for ob in query.order_by or []:
        check("orderBy", ob.field)

    return errors
