import pytest

from institut_backend.services import loyalty
from tests import fakes


@pytest.mark.parametrize(
    "spent, tier",
    [(0, "bronze"), (199_999, "bronze"), (200_000, "silver"), (500_000, "gold"), (1_250_000, "platinum")],
)
def test_compute_tier(spent, tier):
    assert loyalty.compute_tier(spent) == tier


def test_points_for_rounds_down():
    assert loyalty.points_for(12_999) == 12
    assert loyalty.points_for(-500) == 0


def test_record_visit_updates_points_and_tier(monkeypatch):
    card = {"id": "f1", "card_number": "FID-1", "status": "active", "points_balance": 10, "total_spent": 190_000,
            "total_visits": 4, "tier": "bronze"}

    def handler(sql, params):
        if "FOR UPDATE" in sql:
            return [card]
        return fakes.echo_inserts(sql, params)

    fakes.install(monkeypatch, loyalty, handler=handler)

    record = loyalty.record_visit("f1", 15_000)

    assert record["points_balance"] == 25
    assert record["total_visits"] == 5
    assert record["total_spent"] == 205_000
    assert record["tier"] == "silver"


def test_record_visit_refuses_inactive_card(monkeypatch):
    fakes.install(monkeypatch, loyalty, handler=lambda sql, params: [{"id": "f1", "status": "blocked"}])
    with pytest.raises(ValueError):
        loyalty.record_visit("f1", 1000)


def test_create_card_generates_number(monkeypatch):
    fakes.install(monkeypatch)
    card = loyalty.create_card({"client_id": "c1", "tier": None})
    assert card["card_number"].startswith("FID-")
    assert card["total_visits"] == 0
    assert "tier" not in card
