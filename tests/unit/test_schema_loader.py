"""
Unit tests -- schema catalog loading and look-ups.
"""
from src.catalog.schema_loader import SchemaCatalog, load_catalog, parse_catalog


def test_loads_without_error():
    catalog = load_catalog()
    assert isinstance(catalog, SchemaCatalog)
    assert catalog.version == 1


def test_tables_and_views_listed():
    names = load_catalog().table_names()
    assert "deals" in names
    assert "sales_revenue" in names
    assert load_catalog().table("sales_revenue").type == "view"


def test_column_metadata():
    deals = load_catalog().table("deals")
    assert deals.column("id").is_primary_key
    fk = deals.column("account_id")
    assert fk.is_foreign_key
    assert (fk.referenced_table, fk.referenced_column) == ("accounts", "id")
    assert deals.column("missing") is None


def test_field_descriptors():
    catalog = load_catalog()
    amount = catalog.field("deals", "amount")
    assert amount.name == "amount"
    assert amount.table == "deals"
    assert amount.type.startswith("DECIMAL")
    assert catalog.field("deals", "nope") is None
    assert catalog.field("nope", "amount") is None
    assert [f.name for f in catalog.fields("sales_revenue")] == ["month", "lead_source", "revenue"]
    assert catalog.fields("nope") == []


def test_column_type():
    assert load_catalog().column_type("sales_revenue", "lead_source") == "VARCHAR(50)"
    assert load_catalog().column_type("sales_revenue", "nope") is None


def test_parse_minimal_catalog():
    catalog = parse_catalog({"tables": [{"name": "t", "columns": [{"name": "c", "type": "TEXT"}]}]})
    assert catalog.version == 1
    table = catalog.table("t")
    assert table.type == "table"
    assert table.column("c").nullable is True


def test_to_dict_is_camel_case():
    data = load_catalog().to_dict()
    deals = next(t for t in data["tables"] if t["name"] == "deals")
    col = next(c for c in deals["columns"] if c["name"] == "account_id")
    assert col["isForeignKey"] is True
    assert col["referencedTable"] == "accounts"
