"""
Request-scoped access to the collaborators registered on ``app.state``.
"""
from __future__ import annotations

from fastapi import Request
from sqlalchemy.engine import Engine

from src.catalog.schema_loader import SchemaCatalog, load_catalog
from src.dashboards.service import DashboardService
from src.db.cache import ResultCache
from src.db.connection import get_engine


def get_dashboard_service(request: Request) -> DashboardService:
    return DashboardService(request.app.state.dashboard_repo)


def get_db_engine(request: Request) -> Engine:
    return request.app.state.engine or get_engine()


def get_result_cache(request: Request) -> ResultCache:
    return request.app.state.result_cache


def get_schema_catalog(request: Request) -> SchemaCatalog:
    return request.app.state.schema_catalog or load_catalog()
