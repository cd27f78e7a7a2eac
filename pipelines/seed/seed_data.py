"""
Seed data generator -- creates the demo tables the sample dashboards read.

Generates:
  - ~300 accounts with ~1 500 deals (stage, amount, probability, close date)
  - sales_revenue      monthly revenue per lead source
  - pipeline_stages    open amount per deal stage
  - ar_aging           amount due per aging bucket
  - top_accounts       90-day revenue of the largest accounts

Tables are (re)created with SQLAlchemy in the configured database.
Run:  python -m pipelines.seed.seed_data
"""
from __future__ import annotations

import random
from collections import defaultdict
from datetime import date, timedelta

from faker import Faker
from sqlalchemy import Column, Date, Integer, MetaData, Numeric, String, Table

from src.db.connection import get_engine

fake = Faker()
Faker.seed(42)
random.seed(42)

# ── Tunables ─────────────────────────────────────────────
NUM_ACCOUNTS = 300
NUM_DEALS = 1_500
TOP_ACCOUNTS = 10

INDUSTRIES = ["Software", "Retail", "Healthcare", "Finance", "Manufacturing", "Education"]
STAGES = ["Prospecting", "Qualification", "Proposal", "Negotiation", "Closed Won", "Closed Lost"]
LEAD_SOURCES = ["Website", "Referral", "Events", "Outbound"]
AGING_BUCKETS = ["0-30 days", "31-60 days", "61-90 days", "90+ days"]

DATE_START = date(2024, 1, 1)
DATE_END = date(2025, 12, 31)
DATE_RANGE_DAYS = (DATE_END - DATE_START).days

metadata = MetaData()

accounts = Table(
    "accounts", metadata,
    Column("id", Integer, primary_key=True),
    Column("customer_id", Integer, nullable=False),
    Column("account_name", String(255), nullable=False),
    Column("industry", String(100)),
    Column("revenue", Numeric(12, 2)),
    Column("created_at", Date, nullable=False),
)
deals = Table(
    "deals", metadata,
    Column("id", Integer, primary_key=True),
    Column("account_id", Integer, nullable=False),
    Column("deal_name", String(255), nullable=False),
    Column("stage", String(50), nullable=False),
    Column("amount", Numeric(12, 2), nullable=False),
    Column("probability", Numeric(3, 2), nullable=False),
    Column("close_date", Date),
    Column("created_at", Date, nullable=False),
)
sales_revenue = Table(
    "sales_revenue", metadata,
    Column("month", String(10), nullable=False),
    Column("lead_source", String(50), nullable=False),
    Column("revenue", Numeric(15, 2), nullable=False),
)
pipeline_stages = Table(
    "pipeline_stages", metadata,
    Column("stage", String(50), nullable=False),
    Column("amount", Numeric(15, 2), nullable=False),
)
ar_aging = Table(
    "ar_aging", metadata,
    Column("aging_bucket", String(20), nullable=False),
    Column("amount_due", Numeric(15, 2), nullable=False),
)
top_accounts = Table(
    "top_accounts", metadata,
    Column("account_name", String(255), nullable=False),
    Column("revenue_90d", Numeric(15, 2), nullable=False),
)


def _rand_date() -> date:
    return DATE_START + timedelta(days=random.randint(0, DATE_RANGE_DAYS))


# ── Generators ───────────────────────────────────────────

def gen_accounts() -> list[dict]:
    rows = []
    for aid in range(1, NUM_ACCOUNTS + 1):
        rows.append({
            "id": aid,
            "customer_id": aid,
            "account_name": fake.unique.company(),
            "industry": random.choice(INDUSTRIES),
            "revenue": round(random.uniform(10_000, 2_000_000), 2),
            "created_at": _rand_date(),
        })
    return rows


def gen_deals(account_rows: list[dict]) -> list[dict]:
    account_ids = [a["id"] for a in account_rows]
    rows = []
    for did in range(1, NUM_DEALS + 1):
        created = _rand_date()
        rows.append({
            "id": did,
            "account_id": random.choice(account_ids),
            "deal_name": f"{fake.bs().title()} ({did})",
            "stage": random.choice(STAGES),
            "amount": round(random.uniform(1_000, 250_000), 2),
            "probability": round(random.random(), 2),
            "close_date": created + timedelta(days=random.randint(14, 180)),
            "created_at": created,
        })
    return rows


def gen_sales_revenue(deal_rows: list[dict]) -> list[dict]:
    totals: dict[tuple[str, str], float] = defaultdict(float)
    for d in deal_rows:
        if d["stage"] != "Closed Won":
            continue
        month = d["close_date"].strftime("%Y-%m")
        totals[(month, random.choice(LEAD_SOURCES))] += d["amount"]
    return [
        {"month": month, "lead_source": source, "revenue": round(amount, 2)}
        for (month, source), amount in sorted(totals.items())
    ]


def gen_pipeline_stages(deal_rows: list[dict]) -> list[dict]:
    totals: dict[str, float] = defaultdict(float)
    for d in deal_rows:
        totals[d["stage"]] += d["amount"]
    return [{"stage": s, "amount": round(totals[s], 2)} for s in STAGES if s in totals]


def gen_ar_aging() -> list[dict]:
    return [
        {"aging_bucket": b, "amount_due": round(random.uniform(5_000, 60_000), 2)}
        for b in AGING_BUCKETS
    ]


def gen_top_accounts(account_rows: list[dict], deal_rows: list[dict]) -> list[dict]:
    names = {a["id"]: a["account_name"] for a in account_rows}
    cutoff = DATE_END - timedelta(days=90)
    totals: dict[int, float] = defaultdict(float)
    for d in deal_rows:
        if d["stage"] == "Closed Won" and d["close_date"] >= cutoff:
            totals[d["account_id"]] += d["amount"]
    ranked = sorted(totals.items(), key=lambda kv: kv[1], reverse=True)[:TOP_ACCOUNTS]
    return [{"account_name": names[aid], "revenue_90d": round(v, 2)} for aid, v in ranked]


# ── Bulk insert helper ───────────────────────────────────

def _bulk_insert(engine, table: Table, rows: list[dict], batch_size: int = 2000):
    """Insert rows into *table* in batches."""
    if not rows:
        return
    with engine.begin() as conn:
        for i in range(0, len(rows), batch_size):
            conn.execute(table.insert(), rows[i : i + batch_size])
    print(f"  ✓ {table.name}: {len(rows):,} rows")


# ── Main ─────────────────────────────────────────────────

def main():
    print("═══ Seed Data Generator ═══")
    engine = get_engine()

    # Recreate tables for idempotency
    print("Recreating demo tables …")
    metadata.drop_all(engine)
    metadata.create_all(engine)

    print("Generating data …")
    account_rows = gen_accounts()
    deal_rows = gen_deals(account_rows)

    print("Inserting …")
    _bulk_insert(engine, accounts, account_rows)
    _bulk_insert(engine, deals, deal_rows)
    _bulk_insert(engine, sales_revenue, gen_sales_revenue(deal_rows))
    _bulk_insert(engine, pipeline_stages, gen_pipeline_stages(deal_rows))
    _bulk_insert(engine, ar_aging, gen_ar_aging())
    _bulk_insert(engine, top_accounts, gen_top_accounts(account_rows, deal_rows))

    print(f"\nDone: seeded {len(account_rows):,} accounts and {len(deal_rows):,} deals.")


if __name__ == "__main__":
    main()
