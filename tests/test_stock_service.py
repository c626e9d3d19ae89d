import pandas as pd
import pytest

from institut_backend.services import audit, stock
from tests import fakes


def _handler(products):
    def handler(sql, params):
        if 'FROM "dd-products"' in sql and "FOR UPDATE" in sql:
            product = products.get(params["id"])
            return [product] if product else None
        if 'FROM "dd-stocks"' in sql and sql.startswith("SELECT"):
            return [{"id": params["id"], "stock_ref": "STK-20240115-07A", "name": "Réception"}]
        return fakes.echo_inserts(sql, params)

    return handler


def test_create_stock_receives_lines_and_audits(monkeypatch):
    engine = fakes.install(monkeypatch, stock, handler=_handler({"p1": {"id": "p1", "sku": "SOI-CRE-482"}}))

    result = stock.create_stock(
        {"name": "Livraison janvier", "stock_ref": "STK-20240115-07A"},
        [{"product_id": "p1", "quantity": 4, "cost_per_unit": 2500}],
        created_by="u1",
    )

    item = result["items"][0]
    assert item["batch_code"].startswith("STK-20240115-07A-482")
    assert item["total_cost"] == 10000
    increments = engine.statements('UPDATE "dd-products" SET stock_quantity = COALESCE')
    assert increments[0][1] == {"id": "p1", "qty": 4}
    assert engine.statements('INSERT INTO "dd-actions"')


def test_create_stock_generates_reference(monkeypatch):
    fakes.install(monkeypatch, stock, handler=_handler({}))
    result = stock.create_stock({"name": "Vide"}, [], created_by=None)
    assert result["stock_ref"].startswith("STK-")
    assert result["items"] == []


def test_unknown_product_aborts_reception(monkeypatch):
    fakes.install(monkeypatch, stock, handler=_handler({}))
    with pytest.raises(stock.StockProductNotFound):
        stock.add_items("s1", [{"product_id": "ghost", "quantity": 1}], created_by="u1")


def test_add_items_requires_lines(monkeypatch):
    fakes.install(monkeypatch, stock, handler=_handler({}))
    with pytest.raises(ValueError):
        stock.add_items("s1", [], created_by="u1")


def test_delete_stock_releases_quantities(monkeypatch):
    def handler(sql, params):
        if 'FROM "dd-stocks"' in sql and sql.startswith("SELECT"):
            return [{"id": "s1", "stock_ref": "STK-20240115-07A"}]
        if 'FROM "dd-stock-items"' in sql and sql.startswith("SELECT"):
            return [{"id": "i1", "product_id": "p1", "quantity": 3}]
        if sql.startswith("DELETE"):
            return [{"id": params["id"]}]
        return None

    engine = fakes.install(monkeypatch, stock, handler=handler)
    stock.delete_stock("s1")

    releases = engine.statements("GREATEST(COALESCE(stock_quantity, 0) - :qty, 0)")
    assert releases[0][1] == {"id": "p1", "qty": 3}
    assert engine.statements('DELETE FROM "dd-stocks"')


def test_fetch_low_stock(monkeypatch):
    sample = pd.DataFrame([{"id": 7, "name": "Gel douche", "sku": "SOI-GEL-100", "stock_quantity": 2.0}])
    captured = {}

    def fake_query(sql, params=None):
        captured.update(params)
        return sample.copy()

    monkeypatch.setattr(stock, "query_df", fake_query)

    df = stock.fetch_low_stock(threshold=5, limit=0)
    assert captured == {"threshold": 5, "limit": 1}
    assert df.iloc[0]["id"] == "7"
    assert df.iloc[0]["stock_quantity"] == 2


def test_audit_record_action_writes_entry(monkeypatch):
    engine = fakes.install(monkeypatch)
    with engine.begin() as conn:
        entry = audit.record_action(
            conn, user_id="u1", action_type="test", table="dd-clients", target_id="c1", description="ok"
        )
    assert entry["cible_table"] == "dd-clients"
    assert entry["date"] is not None
