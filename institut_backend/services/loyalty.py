"""Cartes de fidélité (``dd-cartes-fidelite``)."""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Any

from institut_core.code_generators import generate_loyalty_card_number
from institut_core.data_repository import get_engine
from institut_core.repositories.base import PagedResult, SqlTableRepository
from institut_core.repositories.tables import LOYALTY_CARDS

logger = logging.getLogger(__name__)

POINTS_PER_FCFA = 1000
# (seuil de dépenses cumulées, palier), du plus haut au plus bas
TIER_THRESHOLDS: tuple[tuple[float, str], ...] = (
    (1_000_000, "platinum"),
    (500_000, "gold"),
    (200_000, "silver"),
)

_repo = SqlTableRepository(LOYALTY_CARDS)


def compute_tier(total_spent: float) -> str:
    for threshold, tier in TIER_THRESHOLDS:
        if total_spent >= threshold:
            return tier
    return "bronze"


def points_for(amount: float) -> int:
    return int(math.floor(max(0.0, float(amount)) / POINTS_PER_FCFA))


def list_cards_page(
    *,
    tier: str | None = None,
    status: str | None = None,
    client_id: str | None = None,
    search: str | None = None,
    page: int = 1,
    per_page: int = 20,
) -> PagedResult[dict[str, Any]]:
    return _repo.list_page(page=page, per_page=per_page, search=search, tier=tier, status=status, client_id=client_id)


def get_card(card_id: str) -> dict[str, Any]:
    return _repo.get(card_id)


def create_card(payload: dict[str, Any]) -> dict[str, Any]:
    values = {key: value for key, value in payload.items() if value is not None}
    values["card_number"] = values.get("card_number") or generate_loyalty_card_number()
    values.setdefault("total_spent", 0)
    values.setdefault("total_visits", 0)
    return _repo.insert(values)


def update_card(card_id: str, changes: dict[str, Any]) -> dict[str, Any]:
    return _repo.update(card_id, changes)


def delete_card(card_id: str) -> None:
    _repo.delete(card_id)


def record_visit(card_id: str, amount: float) -> dict[str, Any]:
    """Crédite les points d'une visite et recalcule le palier."""
    with get_engine().begin() as conn:
        card = _repo.fetch_by_id(conn, card_id, for_update=True)
        if card.get("status") not in (None, "active"):
            raise ValueError(f"La carte {card.get('card_number')} n'est pas active.")
        total_spent = float(card.get("total_spent") or 0) + float(amount)
        changes = {
            "points_balance": int(card.get("points_balance") or 0) + points_for(amount),
            "total_spent": total_spent,
            "total_visits": int(card.get("total_visits") or 0) + 1,
            "last_visit": datetime.now(timezone.utc),
            "tier": compute_tier(total_spent),
        }
        record = _repo.update_with(conn, card_id, changes)
    if record.get("tier") != card.get("tier"):
        logger.info("Carte %s : palier %s -> %s", card_id, card.get("tier"), record.get("tier"))
    return record
