"""POST /charts/* -- chart builder mutations, transforms and execution."""
from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.engine import Engine

from src.api.dependencies import get_db_engine, get_result_cache, get_schema_catalog
from src.catalog.schema_loader import SchemaCatalog
from src.charts.mutators import assign_to_axis, assign_to_columns, unassign, unassign_column
from src.charts.shelves import check_drop, drop_field, find_shelf, shelves_for
from src.charts.spec import (
    ChartSpecification,
    ChartType,
    FieldDescriptor,
    Slot,
    new_spec,
    spec_to_dict,
)
from src.charts.table import next_sort_state, sort_table_rows, table_columns
from src.charts.transform import transform_rows
from src.charts.transitions import change_chart_type
from src.db.cache import ResultCache
from src.db.executor import ChartExecutionResult, QueryExecutionError, execute_query
from src.db.query_builder import QueryBuildError
from src.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()



class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class NewSpecRequest(_Request):
    type: ChartType = "bar"
    title: str | None = "New Chart"


class AssignRequest(_Request):
    spec: ChartSpecification
    field: FieldDescriptor
    slot: Slot


class UnassignRequest(_Request):
    spec: ChartSpecification
    slot: Slot


class ColumnRequest(_Request):
    spec: ChartSpecification
    field: FieldDescriptor


class ColumnRemoveRequest(_Request):
    spec: ChartSpecification
    field: str


class TypeChangeRequest(_Request):
    spec: ChartSpecification
    type: ChartType


class DropRequest(_Request):
    spec: ChartSpecification
    field: FieldDescriptor
    shelf_id: str = Field(..., alias="shelfId")


class TransformRequest(_Request):
    spec: ChartSpecification
    rows: list[dict[str, Any]] = Field(default_factory=list)


class ExecuteRequest(_Request):
    spec: ChartSpecification
    use_cache: bool = Field(True, alias="useCache")
    sort_column: str | None = Field(None, alias="sortColumn")
    sort_direction: Literal["asc", "desc"] | None = Field(None, alias="sortDirection")
    clicked_column: str | None = Field(None, alias="clickedColumn")


class CacheStatsResponse(BaseModel):
    size: int
    max_size: int
    ttl_seconds: float
    hits: int
    misses: int
    evictions: int
    hit_rate: float



def _spec_response(spec: ChartSpecification) -> dict:
    return {"spec": spec_to_dict(spec)}


@router.post("/new")
def new_chart(req: NewSpecRequest):
    """Empty specification for a fresh card."""
    return _spec_response(new_spec(req.type, title=req.title))


@router.post("/assign")
def assign(req: AssignRequest):
    return _spec_response(assign_to_axis(req.spec, req.field, req.slot))


@router.post("/unassign")
def remove(req: UnassignRequest):
    return _spec_response(unassign(req.spec, req.slot))


@router.post("/columns/assign")
def assign_column(req: ColumnRequest):
    return _spec_response(assign_to_columns(req.spec, req.field))


@router.post("/columns/unassign")
def remove_column(req: ColumnRemoveRequest):
    return _spec_response(unassign_column(req.spec, req.field))


@router.post("/type")
def change_type(req: TypeChangeRequest):
    """Retarget the chart spec, keeping only the encodings the new type supports."""
    return _spec_response(change_chart_type(req.spec, req.type))


@router.get("/shelves/{chart_type}")
def list_shelves(chart_type: ChartType):
    return {"type": chart_type, "shelves": [s.to_dict() for s in shelves_for(chart_type)]}


@router.post("/drop")
def drop(req: DropRequest):
    """Drop a field on a named shelf, rejecting field types the shelf does not accept."""
    shelf = find_shelf(req.spec.type, req.shelf_id)
    if shelf is None:
        raise HTTPException(status_code=404, detail=f"No shelf '{req.shelf_id}' for {req.spec.type} charts")
    rejection = check_drop(req.spec, req.field, shelf)
    if rejection:
        raise HTTPException(status_code=422, detail=rejection)
    return _spec_response(drop_field(req.spec, req.field, shelf))


@router.post("/transform")
def transform(req: TransformRequest):
    """Reshape caller-supplied rows for the chart."""
    return transform_rows(req.spec, req.rows).to_dict()


@router.post("/execute")
def execute(
    req: ExecuteRequest,
    engine: Engine = Depends(get_db_engine),
    cache: ResultCache = Depends(get_result_cache),
    catalog: SchemaCatalog = Depends(get_schema_catalog),
):
    """Run the chart query, then reshape the rows for rendering.

    Table charts are sorted by ``sortColumn``/``sortDirection``; passing
    ``clickedColumn`` advances that state one header click first.
    """
    result: ChartExecutionResult | None = cache.get(req.spec.query) if req.use_cache else None
    cached = result is not None
    if result is None:
        try:
            result = execute_query(req.spec.query, engine=engine, catalog=catalog)
        except QueryBuildError as exc:
            raise HTTPException(status_code=400, detail=str(exc))
        except QueryExecutionError as exc:
            raise HTTPException(status_code=502, detail=str(exc))
        cache.put(req.spec.query, result)

    chart = transform_rows(req.spec, result.rows)
    logger.info("Chart executed  type=%s rows=%d cached=%s", req.spec.type, result.row_count, cached)
    response = {**result.to_dict(), "cached": cached, "chart": chart.to_dict()}
    if req.spec.type == "table":
        sort_column, sort_direction = req.sort_column, req.sort_direction
        if req.clicked_column:
            sort_column, sort_direction = next_sort_state(sort_column, sort_direction, req.clicked_column)
        response["chart"]["chartData"] = sort_table_rows(chart.chart_data, sort_column, sort_direction)
        response["sort"] = {"column": sort_column, "direction": sort_direction}
        response["columns"] = table_columns(req.spec, chart.chart_data)
    return response


@router.get("/cache/stats", response_model=CacheStatsResponse)
def cache_stats(cache: ResultCache = Depends(get_result_cache)):
    """Return result cache statistics, after dropping expired entries."""
    cache.cleanup_expired()
    return CacheStatsResponse(**cache.stats())


@router.post("/cache/clear")
def cache_clear(source: str | None = None, cache: ResultCache = Depends(get_result_cache)):
    """Flush the result cache, or only the entries read from one source table."""
    if source:
        return {"cleared": cache.invalidate_source(source)}
    return {"cleared": cache.invalidate()}
