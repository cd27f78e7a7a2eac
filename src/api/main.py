"""
FastAPI application entry-point.

``create_app`` wires the collaborators explicitly: the dashboard repository,
database engine, result cache and schema catalog are stored on ``app.state``
and handed to the routers through dependencies.  The module-level ``app``
uses the demo dashboards and the configured database.
"""
from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine

from src.api.routers import catalog, charts, dashboards
from src.catalog.schema_loader import SchemaCatalog
from src.core.config import get_settings
from src.core.logging import configure_sql_logging, get_logger
from src.dashboards.models import Dashboard
from src.dashboards.repository import Repository
from src.dashboards.seed import demo_repository
from src.db.cache import ResultCache

logger = get_logger(__name__)


def create_app(
    dashboard_repo: Repository[Dashboard] | None = None,
    engine: Engine | None = None,
    result_cache: ResultCache | None = None,
    schema_catalog: SchemaCatalog | None = None,
) -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title="Dashboard Chart Builder",
        version="0.1.0",
        description="Compose chart specifications, execute them, and reshape results for rendering",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.dashboard_repo = dashboard_repo if dashboard_repo is not None else demo_repository()
    app.state.engine = engine  # None -> shared engine from settings, created on first query
    app.state.result_cache = result_cache or ResultCache(
        ttl=settings.cache_ttl_seconds, max_size=settings.cache_max_size,
    )
    app.state.schema_catalog = schema_catalog

    configure_sql_logging()
    logger.info("App created  repo=%s engine=%s", type(app.state.dashboard_repo).__name__,
                "injected" if engine is not None else "settings")

    app.include_router(dashboards.router, prefix="/dashboards", tags=["Dashboards"])
    app.include_router(charts.router, prefix="/charts", tags=["Charts"])
    app.include_router(catalog.router, tags=["Catalog"])

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
