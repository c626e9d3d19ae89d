import pytest
from sqlalchemy.exc import IntegrityError

from institut_backend.services import catalog, prestations
from institut_core.code_generators import validate_barcode
from tests import fakes


class _PgError(Exception):
    def __init__(self, pgcode):
        super().__init__(pgcode)
        self.pgcode = pgcode


def test_create_product_generates_sku_and_barcode(monkeypatch):
    def handler(sql, params):
        if sql.startswith('SELECT name FROM "dd-categories"'):
            return [{"name": "Cheveux"}]
        return fakes.echo_inserts(sql, params)

    fakes.install(monkeypatch, catalog, handler=handler)

    product = catalog.create_product(
        {"name": "Shampoing doux", "category_id": "c1", "price": 5000, "sku": None}, created_by="u1"
    )

    assert product["sku"].startswith("CHE-SHA-")
    assert validate_barcode(product["barcode"])
    assert product["created_by"] == "u1"


def test_create_product_keeps_explicit_codes(monkeypatch):
    fakes.install(monkeypatch, catalog)
    product = catalog.create_product(
        {"name": "Savon", "sku": "SOI-SAV-001", "barcode": "1234567890123"}, created_by=None
    )
    assert product["sku"] == "SOI-SAV-001"
    assert product["barcode"] == "1234567890123"


def test_delete_product_archives_when_referenced(monkeypatch):
    def fake_delete(product_id):
        raise IntegrityError("DELETE", {}, _PgError("23503"))

    archived = {}
    monkeypatch.setattr(catalog._products, "delete", fake_delete)
    monkeypatch.setattr(catalog, "update_product", lambda pid, changes: archived.update({pid: changes}))

    assert catalog.delete_product("p1") is True
    assert archived == {"p1": {"is_active": False, "status": "archived"}}


def test_delete_product_hard_delete(monkeypatch):
    monkeypatch.setattr(catalog._products, "delete", lambda product_id: None)
    assert catalog.delete_product("p1") is False


def test_increase_stock_validates_quantity():
    with pytest.raises(ValueError):
        catalog.increase_stock("p1", 0)


def test_increase_stock_unknown_product(monkeypatch):
    fakes.install(monkeypatch, catalog, handler=lambda sql, params: None)
    with pytest.raises(catalog.ProductNotFound):
        catalog.increase_stock("ghost", 2)


def test_list_website_products_nests_category(monkeypatch):
    def handler(sql, params):
        return [
            {
                "id": "p1",
                "name": "Crème",
                "price": 12500,
                "stock_quantity": 25,
                "category_ref": "c1",
                "category_name": "Soins",
                "category_type": "product",
            },
            {"id": "p2", "name": "Savon", "price": 1500, "stock_quantity": 2, "category_ref": None,
             "category_name": None, "category_type": None},
        ]

    engine = fakes.install(monkeypatch, catalog, handler=handler)

    products = catalog.list_website_products(category_id="c1")

    sql, params = engine.executed[0]
    assert "p.show_to_website = TRUE" in sql
    assert params == {"category_id": "c1"}
    assert products[0]["category"] == {"id": "c1", "name": "Soins", "type": "product"}
    assert products[0]["availability"]["status"] == "in-stock"
    assert products[1]["category"] is None
    assert products[1]["availability"]["status"] == "low-stock"


def test_get_website_product_hides_unpublished(monkeypatch):
    monkeypatch.setattr(
        catalog,
        "get_product",
        lambda pid: {"id": pid, "show_to_website": False, "is_active": True, "status": "active", "stock_quantity": 3},
    )
    with pytest.raises(catalog.ProductNotFound):
        catalog.get_website_product("p1")


def test_prestations_filter_on_is_active(monkeypatch):
    engine = fakes.install(
        monkeypatch,
        handler=lambda sql, params: [{"count": 0}] if sql.startswith("SELECT COUNT") else [],
    )
    prestations.list_services_page(is_active=True, search="massage", page=1, per_page=10)
    count_sql, params = engine.executed[0]
    assert 'FROM "dd-services"' in count_sql
    assert params["f_is_active"] is True
