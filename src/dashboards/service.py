"""
Dashboard service -- create, arrange and edit dashboards and their chart cards.

All state lives in the injected repository; the service itself is stateless
and can be shared freely.
"""
from __future__ import annotations

import uuid
from typing import Callable, Iterable

from src.charts.spec import ChartSpecification
from src.core.logging import get_logger
from src.core.utils import utc_now_iso
from src.dashboards.models import Card, Dashboard, LayoutItem
from src.dashboards.repository import Repository

logger = get_logger(__name__)

# Default footprint of a newly added card on the grid.
NEW_CARD_WIDTH = 4
NEW_CARD_HEIGHT = 5


class DashboardNotFoundError(LookupError):
    def __init__(self, dashboard_id: str):
        super().__init__(f"Dashboard with id {dashboard_id} not found")
        self.dashboard_id = dashboard_id


def _new_card_id() -> str:
    return f"card_{uuid.uuid4().hex[:12]}"


class DashboardService:
    """Dashboard operations over a ``Repository[Dashboard]``.

    Parameters
    ----------
    repo : Repository
        Where dashboards are stored.
    clock : callable, optional
        Returns the current timestamp string; defaults to UTC ISO-8601.
    """

    def __init__(
        self,
        repo: Repository[Dashboard],
        clock: Callable[[], str] = utc_now_iso,
        card_id_factory: Callable[[], str] = _new_card_id,
    ):
        self._repo = repo
        self._clock = clock
        self._card_id_factory = card_id_factory

    # ── Queries ─────────────────────────────────────────

    def list_dashboards(self) -> list[Dashboard]:
        return sorted(self._repo.list(), key=lambda d: d.order)

    def get_dashboard(self, dashboard_id: str) -> Dashboard | None:
        return self._repo.get(dashboard_id)

    def _require(self, dashboard_id: str) -> Dashboard:
        dashboard = self._repo.get(dashboard_id)
        if dashboard is None:
            raise DashboardNotFoundError(dashboard_id)
        return dashboard

    # ── Dashboards ──────────────────────────────────────

    def _next_order(self) -> int:
        orders = [d.order for d in self._repo.list()]
        return max(orders) + 1 if orders else 0

    def _next_id(self) -> str:
        numeric = [int(d.id) for d in self._repo.list() if d.id.isdigit()]
        return str(max(numeric) + 1 if numeric else 1)

    def create_dashboard(self, name: str, category: str, description: str = "") -> Dashboard:
        now = self._clock()
        dashboard = Dashboard(
            id=self._next_id(),
            name=name,
            description=description or "",
            category=category,
            created_at=now,
            last_modified=now,
            order=self._next_order(),
        )
        logger.info("Dashboard created  id=%s name=%s", dashboard.id, name)
        return self._repo.upsert(dashboard)

    def update_dashboard(
        self,
        dashboard_id: str,
        name: str | None = None,
        description: str | None = None,
        category: str | None = None,
    ) -> Dashboard:
        dashboard = self._require(dashboard_id)
        if name is not None:
            dashboard.name = name
        if description is not None:
            dashboard.description = description
        if category is not None:
            dashboard.category = category
        dashboard.last_modified = self._clock()
        return self._repo.upsert(dashboard)

    def update_layout(self, dashboard_id: str, layout: list[LayoutItem]) -> Dashboard:
        dashboard = self._require(dashboard_id)
        dashboard.layout = list(layout)
        dashboard.last_modified = self._clock()
        return self._repo.upsert(dashboard)

    def reorder(self, order: Iterable[tuple[str, int]]) -> list[Dashboard]:
        """Apply ``(id, order)`` pairs; unknown ids are skipped."""
        updated: list[Dashboard] = []
        for dashboard_id, position in order:
            dashboard = self._repo.get(dashboard_id)
            if dashboard is None:
                logger.warning("Reorder skipped unknown dashboard id=%s", dashboard_id)
                continue
            dashboard.order = position
            dashboard.last_modified = self._clock()
            updated.append(self._repo.upsert(dashboard))
        return updated

    def duplicate_dashboard(self, dashboard_id: str) -> Dashboard:
        original = self._require(dashboard_id)
        now = self._clock()
        copy = original.model_copy(
            deep=True,
            update={
                "id": self._next_id(),
                "name": f"{original.name} (Copy)",
                "created_at": now,
                "last_modified": now,
                "order": self._next_order(),
            },
        )
        logger.info("Dashboard duplicated  from=%s to=%s", dashboard_id, copy.id)
        return self._repo.upsert(copy)

    def delete_dashboard(self, dashboard_id: str) -> bool:
        return self._repo.delete(dashboard_id)

    # ── Cards ───────────────────────────────────────────

    def upsert_card(
        self,
        dashboard_id: str,
        chart_spec: ChartSpecification,
        card_id: str | None = None,
    ) -> Card:
        """Replace the card with *card_id*, or add a new card.

        Cards that are not on the grid yet are placed at the bottom-left,
        below the lowest existing item.
        """
        dashboard = self._require(dashboard_id)
        card = Card(id=card_id or self._card_id_factory(), chart_spec=chart_spec)

        for idx, existing in enumerate(dashboard.cards):
            if existing.id == card.id:
                dashboard.cards[idx] = card
                break
        else:
            dashboard.cards.append(card)

        if not any(item.i == card.id for item in dashboard.layout):
            bottom = max((item.y + item.h for item in dashboard.layout), default=0)
            dashboard.layout.append(
                LayoutItem(i=card.id, x=0, y=bottom, w=NEW_CARD_WIDTH, h=NEW_CARD_HEIGHT)
            )

        dashboard.last_modified = self._clock()
        self._repo.upsert(dashboard)
        logger.info("Card saved  dashboard=%s card=%s type=%s", dashboard_id, card.id, chart_spec.type)
        return card

    def delete_card(self, dashboard_id: str, card_id: str) -> bool:
        """Remove a card and its layout slot. Returns whether a card was removed."""
        dashboard = self._require(dashboard_id)
        before = len(dashboard.cards)
        dashboard.cards = [c for c in dashboard.cards if c.id != card_id]
        dashboard.layout = [item for item in dashboard.layout if item.i != card_id]
        dashboard.last_modified = self._clock()
        self._repo.upsert(dashboard)
        return len(dashboard.cards) < before
