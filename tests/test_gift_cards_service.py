import datetime as dt

import pytest
from sqlalchemy.exc import IntegrityError

from institut_backend.services import gift_cards
from institut_core.code_generators import GIFT_CARD_PATTERN
from tests import fakes


class _PgError(Exception):
    def __init__(self, pgcode):
        super().__init__(pgcode)
        self.pgcode = pgcode


def _integrity(pgcode):
    return IntegrityError("INSERT", {}, _PgError(pgcode))


def _card_handler(card):
    def handler(sql, params):
        if 'FROM "dd-gift-cards"' in sql and "FOR UPDATE" in sql:
            return [card]
        return fakes.echo_inserts(sql, params)

    return handler


def _card(**overrides):
    card = {"id": "g1", "code": "GC-AAAA-BBBB", "status": "active", "current_balance": 20000, "expiry_date": None}
    card.update(overrides)
    return card


def test_redeem_partial_amount(monkeypatch):
    engine = fakes.install(monkeypatch, gift_cards, handler=_card_handler(_card()))

    record = gift_cards.redeem("g1", 5000, created_by="u1")

    assert record["current_balance"] == 15000
    assert "status" not in record
    transaction = record["transactions"][0]
    assert transaction["balance_before"] == 20000
    assert transaction["balance_after"] == 15000
    assert transaction["transaction_type"] == "redemption"
    assert engine.statements('INSERT INTO "dd-gift-card-transactions"')


def test_redeem_full_balance_marks_card_used(monkeypatch):
    fakes.install(monkeypatch, gift_cards, handler=_card_handler(_card()))
    record = gift_cards.redeem("g1", 20000, created_by="u1")
    assert record["status"] == "used"
    assert record["current_balance"] == 0


@pytest.mark.parametrize(
    "card, amount",
    [
        (_card(status="used"), 100),
        (_card(expiry_date=dt.date(2024, 1, 1)), 100),
        (_card(), 25000),
    ],
)
def test_redeem_refuses_unavailable_cards(monkeypatch, card, amount):
    fakes.install(monkeypatch, gift_cards, handler=_card_handler(card))
    with pytest.raises(gift_cards.GiftCardUnavailable):
        gift_cards.redeem("g1", amount, created_by="u1", today=dt.date(2024, 6, 1))


def test_redeem_requires_positive_amount():
    with pytest.raises(ValueError):
        gift_cards.redeem("g1", 0, created_by="u1")


def test_create_gift_card_records_purchase(monkeypatch):
    engine = fakes.install(monkeypatch, gift_cards)

    card = gift_cards.create_gift_card({"initial_amount": 30000, "client_id": None}, created_by="u1")

    assert GIFT_CARD_PATTERN.match(card["code"])
    assert card["current_balance"] == 30000
    assert card["status"] == "active"
    purchase = engine.statements('INSERT INTO "dd-gift-card-transactions"')[0][1]
    assert purchase["transaction_type"] == "purchase"
    assert purchase["balance_after"] == 30000


def test_generated_code_collision_is_retried(monkeypatch):
    attempts = []

    def fake_insert(values, created_by):
        attempts.append(values["code"])
        if len(attempts) == 1:
            raise _integrity("23505")
        return dict(values, id="g2")

    monkeypatch.setattr(gift_cards, "_insert_card", fake_insert)

    card = gift_cards.create_gift_card({"initial_amount": 10000}, created_by="u1")
    assert card["id"] == "g2"
    assert len(attempts) == 2


def test_explicit_duplicate_code_conflicts(monkeypatch):
    def fake_insert(values, created_by):
        raise _integrity("23505")

    monkeypatch.setattr(gift_cards, "_insert_card", fake_insert)

    with pytest.raises(gift_cards.GiftCardConflict):
        gift_cards.create_gift_card({"initial_amount": 10000, "code": "gc-abcd-efgh"}, created_by="u1")


def test_other_integrity_errors_propagate(monkeypatch):
    def fake_insert(values, created_by):
        raise _integrity("23503")

    monkeypatch.setattr(gift_cards, "_insert_card", fake_insert)

    with pytest.raises(IntegrityError):
        gift_cards.create_gift_card({"initial_amount": 10000, "client_id": "ghost"}, created_by="u1")
