"""
Dashboard entities: a dashboard holds chart cards and their grid layout.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from src.charts.spec import ChartSpecification


class _Entity(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class LayoutItem(_Entity):
    """Grid placement of one card (``i`` is the card id)."""

    i: str
    x: int = 0
    y: int = 0
    w: int = 4
    h: int = 5


class Card(_Entity):
    id: str
    chart_spec: ChartSpecification = Field(..., alias="chartSpec")


class Dashboard(_Entity):
    id: str
    name: str
    description: str = ""
    category: str
    created_at: str = Field("", alias="createdAt")
    last_modified: str = Field("", alias="lastModified")
    order: int = 0
    layout: list[LayoutItem] = Field(default_factory=list)
    cards: list[Card] = Field(default_factory=list)

    def card(self, card_id: str) -> Card | None:
        for card in self.cards:
            if card.id == card_id:
                return card
        return None


def dashboard_to_dict(dashboard: Dashboard) -> dict:
    """Serialise with camelCase keys and chart specs in their persisted form."""
    return dashboard.model_dump(mode="json", by_alias=True, exclude_none=True)
