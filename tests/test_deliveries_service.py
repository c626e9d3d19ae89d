import pytest

from institut_backend.services import deliveries
from tests import fakes


def _current(statut):
    def handler(sql, params):
        if "FOR UPDATE" in sql:
            return [{"id": "l1", "statut": statut, "mode": "interne"}]
        return fakes.echo_inserts(sql, params)

    return handler


def test_create_delivery_starts_in_preparation(monkeypatch):
    engine = fakes.install(monkeypatch, deliveries)

    record = deliveries.create_delivery(
        {"adresse": "Hamdallaye ACI 2000", "mode": "externe", "livreur_id": "u7", "livreur_name": "Moto Express",
         "frais": 1500, "statut": "livre"},
        user_id="u1",
    )

    assert record["statut"] == "en_preparation"
    assert record["created_by"] == "u1"
    assert record["livreur_id"] is None
    assert record["livreur_name"] == "Moto Express"
    assert engine.statements('INSERT INTO "dd-livraisons"')


def test_internal_delivery_drops_external_courier(monkeypatch):
    fakes.install(monkeypatch, deliveries)
    record = deliveries.create_delivery({"adresse": "Badalabougou", "livreur_id": "u7", "livreur_name": "x"}, user_id=None)
    assert record["mode"] == "interne"
    assert record["livreur_name"] is None


@pytest.mark.parametrize(
    "current, target",
    [("en_preparation", "expedie"), ("expedie", "livre"), ("expedie", "retourne"), ("livre", "retourne")],
)
def test_allowed_status_changes(monkeypatch, current, target):
    engine = fakes.install(monkeypatch, deliveries, handler=_current(current))
    record = deliveries.update_status("l1", target)
    assert record["statut"] == target
    assert engine.statements('UPDATE "dd-livraisons" SET statut = :statut')


@pytest.mark.parametrize("current, target", [("livre", "en_preparation"), ("annule", "expedie"), ("en_preparation", "livre")])
def test_refused_status_changes(monkeypatch, current, target):
    engine = fakes.install(monkeypatch, deliveries, handler=_current(current))
    with pytest.raises(deliveries.InvalidDeliveryTransition):
        deliveries.update_status("l1", target)
    assert not engine.statements("UPDATE")


def test_edit_switching_to_external_clears_employee(monkeypatch):
    engine = fakes.install(monkeypatch, deliveries, handler=_current("en_preparation"))

    deliveries.update_delivery("l1", {"mode": "externe", "livreur_name": "Taxi Moto", "statut": None})

    _, params = engine.statements('UPDATE "dd-livraisons"')[0]
    assert params["livreur_id"] is None
    assert params["livreur_name"] == "Taxi Moto"
    assert "statut" not in params


def test_list_deliveries_filters_by_created_at(monkeypatch):
    def handler(sql, params):
        if sql.startswith("SELECT COUNT(*)"):
            return [{"count": 0}]
        return []

    engine = fakes.install(monkeypatch, deliveries, handler=handler)
    deliveries.list_deliveries_page(statut="expedie", date_from="2026-03-01")

    sql, params = engine.statements("SELECT COUNT(*)")[0]
    assert "created_at >= :date_from" in sql
    assert params["f_statut"] == "expedie"
