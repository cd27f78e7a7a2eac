"""
Demo dashboards loaded from ``catalog/dashboards.yml``.
"""
from __future__ import annotations

from pathlib import Path

import yaml

from src.core.config import get_settings
from src.dashboards.models import Dashboard
from src.dashboards.repository import InMemoryRepository


def load_demo_dashboards(path: str | None = None) -> list[Dashboard]:
    """Parse the demo dashboards file (empty list when it does not exist)."""
    dashboards_path = Path(path or get_settings().dashboards_path)
    if not dashboards_path.exists():
        return []
    with open(dashboards_path) as f:
        raw = yaml.safe_load(f) or {}
    return [Dashboard.model_validate(d) for d in raw.get("dashboards", [])]


def demo_repository(path: str | None = None) -> InMemoryRepository[Dashboard]:
    return InMemoryRepository(load_demo_dashboards(path))
