"""
GET /schema, GET /schema/{table}/fields -- schema browser endpoints.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from src.api.dependencies import get_schema_catalog
from src.catalog.schema_loader import SchemaCatalog
from src.charts.fields import field_data_type

router = APIRouter()


@router.get("/schema")
def schema_metadata(catalog: SchemaCatalog = Depends(get_schema_catalog)) -> dict:
    """Return every table / view with its columns."""
    return catalog.to_dict()


@router.get("/schema/{table}/fields")
def table_fields(table: str, catalog: SchemaCatalog = Depends(get_schema_catalog)) -> dict:
    """Return draggable field descriptors for one table."""
    if catalog.table(table) is None:
        raise HTTPException(status_code=404, detail=f"Unknown table '{table}'")
    return {
        "table": table,
        "fields": [
            {**f.model_dump(), "dataType": field_data_type(f.type)}
            for f in catalog.fields(table)
        ],
    }
