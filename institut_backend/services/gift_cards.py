"""Cartes cadeaux (``dd-gift-cards``) et leur historique de transactions."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from institut_core.code_generators import generate_gift_card_code, normalize_gift_card_code
from institut_core.data_repository import get_engine
from institut_core.repositories.base import PagedResult, RecordNotFound, SqlTableRepository
from institut_core.repositories.tables import GIFT_CARD_TRANSACTIONS, GIFT_CARDS

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
MAX_CODE_ATTEMPTS = 5

_cards = SqlTableRepository(GIFT_CARDS)
_transactions = SqlTableRepository(GIFT_CARD_TRANSACTIONS)


class GiftCardServiceError(Exception):
    """Base exception for gift card operations."""


class GiftCardNotFound(GiftCardServiceError):
    pass


class GiftCardConflict(GiftCardServiceError):
    """Le code demandé existe déjà."""


class GiftCardUnavailable(GiftCardServiceError):
    """Carte inactive, expirée ou solde insuffisant."""


def _is_unique_violation(exc: IntegrityError) -> bool:
    return getattr(exc.orig, "pgcode", None) == UNIQUE_VIOLATION


def list_gift_cards_page(
    *,
    status: str | None = None,
    client_id: str | None = None,
    search: str | None = None,
    page: int = 1,
    per_page: int = 20,
) -> PagedResult[dict[str, Any]]:
    return _cards.list_page(page=page, per_page=per_page, search=search, status=status, client_id=client_id)


def get_gift_card(card_id: str) -> dict[str, Any]:
    with get_engine().begin() as conn:
        try:
            card = _cards.fetch_by_id(conn, card_id)
        except RecordNotFound as exc:
            raise GiftCardNotFound(f"Carte cadeau {card_id} introuvable.") from exc
        card["transactions"] = _transactions.find_by(conn, "gift_card_id", card_id)
    return card


def _insert_card(values: dict[str, Any], created_by: str | None) -> dict[str, Any]:
    with get_engine().begin() as conn:
        card = _cards.insert_with(conn, values)
        _transactions.insert_with(
            conn,
            {
                "gift_card_id": card["id"],
                "amount": card["initial_amount"],
                "balance_before": 0,
                "balance_after": card["initial_amount"],
                "transaction_type": "purchase",
                "notes": "Carte cadeau créée",
                "created_by": created_by,
            },
        )
    return card


def create_gift_card(payload: dict[str, Any], *, created_by: str | None) -> dict[str, Any]:
    """Crée la carte et sa transaction d'achat.

    Un code fourni explicitement et déjà pris lève :class:`GiftCardConflict` ;
    un code généré est retiré en cas de collision.
    """
    values = {key: value for key, value in payload.items() if value is not None}
    values["current_balance"] = values["initial_amount"]
    values["status"] = "active"
    values["created_by"] = created_by

    explicit = values.get("code")
    if explicit:
        values["code"] = normalize_gift_card_code(explicit)
        try:
            return _insert_card(values, created_by)
        except IntegrityError as exc:
            if _is_unique_violation(exc):
                raise GiftCardConflict(f"Le code {values['code']} existe déjà.") from exc
            raise

    for attempt in range(1, MAX_CODE_ATTEMPTS + 1):
        values["code"] = generate_gift_card_code()
        try:
            return _insert_card(values, created_by)
        except IntegrityError as exc:
            if not _is_unique_violation(exc):
                raise
            logger.warning("Collision de code carte cadeau (tentative %s)", attempt)
    raise GiftCardConflict("Impossible de générer un code de carte cadeau unique.")


def redeem(
    card_id: str,
    amount: float,
    *,
    created_by: str | None,
    notes: str | None = None,
    today: dt.date | None = None,
) -> dict[str, Any]:
    if amount <= 0:
        raise ValueError("Le montant doit être positif.")
    today = today or dt.date.today()
    with get_engine().begin() as conn:
        try:
            card = _cards.fetch_by_id(conn, card_id, for_update=True)
        except RecordNotFound as exc:
            raise GiftCardNotFound(f"Carte cadeau {card_id} introuvable.") from exc
        if card.get("status") != "active":
            raise GiftCardUnavailable(f"La carte {card['code']} n'est pas active.")
        expiry = card.get("expiry_date")
        if isinstance(expiry, dt.datetime):
            expiry = expiry.date()
        if expiry is not None and expiry < today:
            raise GiftCardUnavailable(f"La carte {card['code']} a expiré le {expiry:%d/%m/%Y}.")
        balance = float(card.get("current_balance") or 0)
        if amount > balance:
            raise GiftCardUnavailable(f"Solde insuffisant : {balance:.0f}f disponible(s).")

        remaining = round(balance - amount, 2)
        changes: dict[str, Any] = {"current_balance": remaining}
        if remaining <= 0:
            changes["status"] = "used"
        record = _cards.update_with(conn, card_id, changes)
        record["transactions"] = [
            _transactions.insert_with(
                conn,
                {
                    "gift_card_id": card_id,
                    "amount": amount,
                    "balance_before": balance,
                    "balance_after": remaining,
                    "transaction_type": "redemption",
                    "notes": notes,
                    "created_by": created_by,
                },
            )
        ]
    return record


def update_gift_card(card_id: str, changes: dict[str, Any]) -> dict[str, Any]:
    try:
        return _cards.update(card_id, changes)
    except RecordNotFound as exc:
        raise GiftCardNotFound(f"Carte cadeau {card_id} introuvable.") from exc


def delete_gift_card(card_id: str) -> None:
    with get_engine().begin() as conn:
        conn.execute(text(f"DELETE FROM {GIFT_CARD_TRANSACTIONS.quoted} WHERE gift_card_id = :id"), {"id": card_id})
        try:
            _cards.delete_with(conn, card_id)
        except RecordNotFound as exc:
            raise GiftCardNotFound(f"Carte cadeau {card_id} introuvable.") from exc
