from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from institut_backend.schemas.promotions import PromotionCreate
from institut_backend.services import promotions
from tests import fakes

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)
WINDOW = {"start_date": "2026-03-01T00:00:00+00:00", "end_date": "2026-03-31T23:59:00+00:00"}


@pytest.mark.parametrize(
    "promotion, state",
    [
        ({"is_active": True, **WINDOW}, "active"),
        ({"is_active": True, "start_date": "2026-04-01", "end_date": "2026-04-30"}, "scheduled"),
        ({"is_active": True, "start_date": "2026-01-01", "end_date": "2026-02-01"}, "expired"),
        ({"is_active": False, **WINDOW}, "inactive"),
    ],
)
def test_promotion_state(promotion, state):
    assert promotions.promotion_state(promotion, NOW) == state


def test_code_is_uppercased_and_checked():
    promo = PromotionCreate(name="Printemps", code="printemps26", min_purchase_amount=0, usage_limit=0, **WINDOW)
    assert promo.code == "PRINTEMPS26"
    assert promo.min_purchase_amount is None
    assert promo.usage_limit is None

    with pytest.raises(ValidationError):
        PromotionCreate(name="Bad", code="ab", **WINDOW)
    with pytest.raises(ValidationError):
        PromotionCreate(name="Bad", code="PROMO-10", **WINDOW)


def test_window_must_be_ordered():
    with pytest.raises(ValidationError):
        PromotionCreate(name="Inverse", code="INV10", start_date=WINDOW["end_date"], end_date=WINDOW["start_date"])


def test_percentage_is_capped():
    with pytest.raises(ValidationError):
        PromotionCreate(name="Trop", code="TROP", type="percentage", value=150, **WINDOW)


def test_create_promotion_rejects_duplicate_code(monkeypatch):
    def handler(sql, params):
        if "WHERE code = :value" in sql:
            return [{"id": "p0", "code": params["value"]}]
        return fakes.echo_inserts(sql, params)

    engine = fakes.install(monkeypatch, promotions, handler=handler)
    with pytest.raises(promotions.DuplicatePromotionCode):
        promotions.create_promotion({"name": "Double", "code": "SOLDES", **WINDOW})
    assert not engine.statements("INSERT")


def test_create_promotion_serializes_conditions(monkeypatch):
    def handler(sql, params):
        if "WHERE code = :value" in sql:
            return []
        return fakes.echo_inserts(sql, params)

    fakes.install(monkeypatch, promotions, handler=handler)
    record = promotions.create_promotion(
        {"name": "Duo", "code": "DUO", "type": "buy_x_get_y", "conditions": {"buy": 2, "get": 1}, **WINDOW}
    )

    assert record["usage_count"] == 0
    assert record["conditions"] == '{"buy": 2, "get": 1}'
    assert record["state"] in {"active", "scheduled", "expired"}


def test_update_rejects_end_before_current_start(monkeypatch):
    def handler(sql, params):
        if "FOR UPDATE" in sql:
            return [{"id": "p1", "code": "DUO", "is_active": True, **WINDOW}]
        return fakes.echo_inserts(sql, params)

    engine = fakes.install(monkeypatch, promotions, handler=handler)
    with pytest.raises(promotions.PromotionError):
        promotions.update_promotion("p1", {"end_date": datetime(2026, 2, 1, tzinfo=timezone.utc)})
    assert not engine.statements('UPDATE "dd-promotions"')


def test_promotion_stats(monkeypatch):
    def handler(sql, params):
        return [{"total": 7, "active": 3, "scheduled": 1, "expired": None}]

    engine = fakes.install(monkeypatch, promotions, handler=handler)
    assert promotions.promotion_stats(NOW) == {"total": 7, "active": 3, "scheduled": 1, "expired": 0}
    assert engine.executed[0][1] == {"now": NOW}
