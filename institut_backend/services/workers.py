"""Fiches des travailleurs (``dd-travailleurs``) et suivi salaire / présence / paiements."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from institut_core.data_repository import get_engine
from institut_core.repositories.base import PagedResult, SqlTableRepository
from institut_core.repositories.tables import WORKERS

logger = logging.getLogger(__name__)

HISTORY_COLUMNS = ("salary_history", "payments_history", "work_history", "notes_history")

_repo = SqlTableRepository(WORKERS)


def list_workers_page(
    *,
    search: str | None = None,
    is_active: bool | None = None,
    specialite: str | None = None,
    page: int = 1,
    per_page: int = 20,
) -> PagedResult[dict[str, Any]]:
    return _repo.list_page(page=page, per_page=per_page, search=search, is_active=is_active, specialite=specialite)


def get_worker(worker_id: str) -> dict[str, Any]:
    return _repo.get(worker_id)


def create_worker(payload: dict[str, Any]) -> dict[str, Any]:
    values = {key: value for key, value in payload.items() if value is not None}
    values.setdefault("is_active", True)
    for column in ("total_services", "total_montants_recus", "jours_travailles", "heures_travailles"):
        values[column] = 0
    for column in HISTORY_COLUMNS:
        values[column] = json.dumps([])
    return _repo.insert(values)


def update_worker(worker_id: str, changes: dict[str, Any]) -> dict[str, Any]:
    return _repo.update(worker_id, changes)


def delete_worker(worker_id: str) -> None:
    _repo.delete(worker_id)


def build_activity_changes(
    worker: dict[str, Any],
    entry: dict[str, Any],
    *,
    added_by: str | None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Calcule les colonnes à écrire pour une saisie de suivi.

    Le salaire remplace la valeur courante ; jours, heures et paiements
    s'ajoutent aux cumuls. Chaque saisie est tracée dans l'historique
    correspondant. Une note seule va dans ``notes_history``.
    """
    stamp = (now or datetime.now(timezone.utc)).isoformat()
    note = entry.get("note") or None
    histories = {column: list(worker.get(column) or []) for column in HISTORY_COLUMNS}
    changes: dict[str, Any] = {}

    salary = float(entry.get("salaire") or 0)
    if salary > 0:
        changes["salaire"] = salary
        histories["salary_history"].append({"date": stamp, "amount": salary, "added_by": added_by, "note": note})

    days = int(entry.get("jours_travailles") or 0)
    if days > 0:
        changes["jours_travailles"] = int(worker.get("jours_travailles") or 0) + days
        histories["work_history"].append(
            {"date": stamp, "days": days, "hours": 0, "added_by": added_by, "note": note}
        )

    hours = float(entry.get("heures_travailles") or 0)
    if hours > 0:
        changes["heures_travailles"] = float(worker.get("heures_travailles") or 0) + hours
        histories["work_history"].append(
            {"date": stamp, "days": 0, "hours": hours, "added_by": added_by, "note": note}
        )

    received = float(entry.get("montant_recu") or 0)
    if received > 0:
        changes["total_montants_recus"] = float(worker.get("total_montants_recus") or 0) + received
        histories["payments_history"].append(
            {"date": stamp, "amount": received, "added_by": added_by, "note": note}
        )

    if note and not changes:
        histories["notes_history"].append({"date": stamp, "note": note, "added_by": added_by})

    for column, entries in histories.items():
        if len(entries) != len(worker.get(column) or []):
            changes[column] = entries
    return changes


def record_activity(worker_id: str, entry: dict[str, Any], *, added_by: str | None) -> dict[str, Any]:
    with get_engine().begin() as conn:
        worker = _repo.fetch_by_id(conn, worker_id, for_update=True)
        changes = build_activity_changes(worker, entry, added_by=added_by)
        if not changes:
            raise ValueError("Aucune information à enregistrer.")
        encoded = {
            key: json.dumps(value, ensure_ascii=False) if key in HISTORY_COLUMNS else value
            for key, value in changes.items()
        }
        record = _repo.update_with(conn, worker_id, encoded)
    logger.info("Suivi du travailleur %s mis à jour (%s)", worker_id, ", ".join(sorted(changes)))
    return record
