"""
Shared fixtures: an in-memory SQLite database holding a small, fixed copy of
the demo tables.
"""
from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from pipelines.seed.seed_data import ar_aging, deals, metadata, sales_revenue, top_accounts

SALES_REVENUE_ROWS = [
    {"month": "2024-01", "lead_source": "Website", "revenue": 100},
    {"month": "2024-01", "lead_source": "Referral", "revenue": 50},
    {"month": "2024-02", "lead_source": "Website", "revenue": 70},
    {"month": "2024-02", "lead_source": "Referral", "revenue": 30},
    {"month": "2024-02", "lead_source": "Events", "revenue": 20},
]

DEAL_ROWS = [
    {"id": 1, "account_id": 1, "deal_name": "Alpha", "stage": "Closed Won", "amount": 1000,
     "probability": 1, "close_date": date(2024, 1, 20), "created_at": date(2024, 1, 2)},
    {"id": 2, "account_id": 1, "deal_name": "Beta", "stage": "Proposal", "amount": 4000,
     "probability": 0.5, "close_date": date(2024, 5, 3), "created_at": date(2024, 1, 15)},
    {"id": 3, "account_id": 2, "deal_name": "Gamma", "stage": "Proposal", "amount": 2500,
     "probability": 0.25, "close_date": None, "created_at": date(2024, 4, 9)},
    {"id": 4, "account_id": 3, "deal_name": "Delta Web", "stage": "Closed Lost", "amount": 500,
     "probability": 0, "close_date": date(2025, 2, 1), "created_at": date(2025, 1, 4)},
]

AR_AGING_ROWS = [
    {"aging_bucket": "0-30 days", "amount_due": 300},
    {"aging_bucket": "31-60 days", "amount_due": 200},
]

TOP_ACCOUNT_ROWS = [
    {"account_name": "Initech", "revenue_90d": 120},
    {"account_name": "Acme", "revenue_90d": 300},
    {"account_name": "Globex", "revenue_90d": 900},
]


@pytest.fixture()
def sqlite_engine():
    """Fresh in-memory database shared across connections of one test."""
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    metadata.create_all(engine, tables=[sales_revenue, deals, ar_aging, top_accounts])
    with engine.begin() as conn:
        conn.execute(sales_revenue.insert(), SALES_REVENUE_ROWS)
        conn.execute(deals.insert(), DEAL_ROWS)
        conn.execute(ar_aging.insert(), AR_AGING_ROWS)
        conn.execute(top_accounts.insert(), TOP_ACCOUNT_ROWS)
    yield engine
    engine.dispose()
