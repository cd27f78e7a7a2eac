"""Dashboard & card endpoints."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from fastapi import APIRouter, Depends, HTTPException

from src.api.dependencies import get_dashboard_service
from src.charts.spec import ChartSpecification, spec_to_dict
from src.dashboards.models import LayoutItem, dashboard_to_dict
from src.dashboards.service import DashboardNotFoundError, DashboardService
from src.core.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()



class CreateDashboardRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    category: str = Field(..., min_length=1)


class UpdateDashboardRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    category: str | None = None


class LayoutRequest(BaseModel):
    layout: list[LayoutItem]


class OrderItem(BaseModel):
    id: str
    order: int


class OrderRequest(BaseModel):
    order: list[OrderItem]


class UpsertCardRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    card_id: str | None = Field(None, alias="cardId")
    chart_spec: ChartSpecification = Field(..., alias="chartSpec")



def _not_found(exc: DashboardNotFoundError) -> HTTPException:
    return HTTPException(status_code=404, detail=str(exc))


@router.get("")
def list_dashboards(service: DashboardService = Depends(get_dashboard_service)) -> list[dict]:
    """All dashboards, sorted by their display order."""
    return [dashboard_to_dict(d) for d in service.list_dashboards()]


@router.post("", status_code=201)
def create_dashboard(req: CreateDashboardRequest, service: DashboardService = Depends(get_dashboard_service)) -> dict:
    dashboard = service.create_dashboard(req.name, req.category, req.description)
    return dashboard_to_dict(dashboard)


@router.put("/order")
def reorder_dashboards(req: OrderRequest, service: DashboardService = Depends(get_dashboard_service)) -> list[dict]:
    """Apply new display positions; unknown ids are ignored."""
    updated = service.reorder((item.id, item.order) for item in req.order)
    return [dashboard_to_dict(d) for d in updated]


@router.get("/{dashboard_id}")
def get_dashboard(dashboard_id: str, service: DashboardService = Depends(get_dashboard_service)) -> dict:
    dashboard = service.get_dashboard(dashboard_id)
    if dashboard is None:
        raise HTTPException(status_code=404, detail=f"Dashboard with id {dashboard_id} not found")
    return dashboard_to_dict(dashboard)


@router.patch("/{dashboard_id}")
def update_dashboard(
    dashboard_id: str,
    req: UpdateDashboardRequest,
    service: DashboardService = Depends(get_dashboard_service),
) -> dict:
    try:
        dashboard = service.update_dashboard(
            dashboard_id, name=req.name, description=req.description, category=req.category,
        )
    except DashboardNotFoundError as exc:
        raise _not_found(exc)
    return dashboard_to_dict(dashboard)


@router.put("/{dashboard_id}/layout")
def update_layout(
    dashboard_id: str,
    req: LayoutRequest,
    service: DashboardService = Depends(get_dashboard_service),
) -> dict:
    try:
        dashboard = service.update_layout(dashboard_id, req.layout)
    except DashboardNotFoundError as exc:
        raise _not_found(exc)
    return dashboard_to_dict(dashboard)


@router.post("/{dashboard_id}/duplicate", status_code=201)
def duplicate_dashboard(dashboard_id: str, service: DashboardService = Depends(get_dashboard_service)) -> dict:
    try:
        dashboard = service.duplicate_dashboard(dashboard_id)
    except DashboardNotFoundError as exc:
        raise _not_found(exc)
    return dashboard_to_dict(dashboard)


@router.delete("/{dashboard_id}")
def delete_dashboard(dashboard_id: str, service: DashboardService = Depends(get_dashboard_service)) -> dict:
    deleted = service.delete_dashboard(dashboard_id)
    logger.info("Dashboard delete  id=%s deleted=%s", dashboard_id, deleted)
    return {"deleted": deleted}


@router.put("/{dashboard_id}/cards")
def upsert_card(
    dashboard_id: str,
    req: UpsertCardRequest,
    service: DashboardService = Depends(get_dashboard_service),
) -> dict:
    """Save a chart card (new when ``cardId`` is omitted)."""
    try:
        card = service.upsert_card(dashboard_id, req.chart_spec, card_id=req.card_id)
    except DashboardNotFoundError as exc:
        raise _not_found(exc)
    return {"id": card.id, "chartSpec": spec_to_dict(card.chart_spec)}


@router.delete("/{dashboard_id}/cards/{card_id}")
def delete_card(
    dashboard_id: str,
    card_id: str,
    service: DashboardService = Depends(get_dashboard_service),
) -> dict:
    try:
        removed = service.delete_card(dashboard_id, card_id)
    except DashboardNotFoundError as exc:
        raise _not_found(exc)
    return {"deleted": removed}
