"""Livraisons (``dd-livraisons``)."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from institut_core.data_repository import get_engine
from institut_core.repositories.base import PagedResult, SqlTableRepository
from institut_core.repositories.tables import DELIVERIES

logger = logging.getLogger(__name__)

DEFAULT_STATUS = "en_preparation"
# Statut courant -> statuts atteignables
TRANSITIONS: dict[str, frozenset[str]] = {
    "en_preparation": frozenset({"expedie", "annule"}),
    "expedie": frozenset({"livre", "retourne", "annule"}),
    "livre": frozenset({"retourne"}),
    "annule": frozenset(),
    "retourne": frozenset(),
}

_repo = SqlTableRepository(DELIVERIES)


class InvalidDeliveryTransition(ValueError):
    pass


def _apply_mode(values: dict[str, Any], mode: str | None) -> dict[str, Any]:
    """Interne : livreur_id seulement. Externe : livreur_name seulement."""
    if mode == "interne":
        values["livreur_name"] = None
    elif mode == "externe":
        values["livreur_id"] = None
    return values


def list_deliveries_page(
    *,
    statut: str | None = None,
    mode: str | None = None,
    client_id: str | None = None,
    search: str | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    page: int = 1,
    per_page: int = 20,
) -> PagedResult[dict[str, Any]]:
    return _repo.list_page(
        page=page,
        per_page=per_page,
        search=search,
        date_from=date_from,
        date_to=date_to,
        statut=statut,
        mode=mode,
        client_id=client_id,
    )


def get_delivery(delivery_id: str) -> dict[str, Any]:
    return _repo.get(delivery_id)


def create_delivery(payload: dict[str, Any], *, user_id: str | None) -> dict[str, Any]:
    values = {key: value for key, value in payload.items() if value is not None}
    values.setdefault("mode", "interne")
    values["statut"] = DEFAULT_STATUS
    values["created_by"] = user_id
    _apply_mode(values, values["mode"])
    record = _repo.insert(values)
    logger.info("Livraison %s créée (%s)", record.get("id"), values["mode"])
    return record


def update_delivery(delivery_id: str, changes: dict[str, Any]) -> dict[str, Any]:
    with get_engine().begin() as conn:
        current = _repo.fetch_by_id(conn, delivery_id, for_update=True)
        if changes.get("statut") is None:
            changes.pop("statut", None)
        else:
            _check_transition(current.get("statut"), changes["statut"])
        if "mode" in changes:
            _apply_mode(changes, changes["mode"])
        return _repo.update_with(conn, delivery_id, changes)


def _check_transition(current: str | None, target: str) -> None:
    current = current or DEFAULT_STATUS
    if target == current:
        return
    if target not in TRANSITIONS.get(current, frozenset()):
        raise InvalidDeliveryTransition(f"Passage de « {current} » à « {target} » impossible.")


def update_status(delivery_id: str, statut: str) -> dict[str, Any]:
    with get_engine().begin() as conn:
        current = _repo.fetch_by_id(conn, delivery_id, for_update=True)
        _check_transition(current.get("statut"), statut)
        record = _repo.update_with(conn, delivery_id, {"statut": statut})
    logger.info("Livraison %s : %s -> %s", delivery_id, current.get("statut"), statut)
    return record


def delete_delivery(delivery_id: str) -> None:
    _repo.delete(delivery_id)
