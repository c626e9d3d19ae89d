"""Rendez-vous (table ``dd-rdv``). Le statut est une simple valeur écrite directement."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from institut_core.data_repository import get_engine
from institut_core.repositories.base import PagedResult, SqlTableRepository
from institut_core.repositories.tables import APPOINTMENTS

from . import audit

logger = logging.getLogger(__name__)

STATUS_LABELS = {
    "en_attente": "En attente",
    "confirme": "Confirmé",
    "termine": "Terminé",
    "annule": "Annulé",
    "no_show": "Absent",
}

_repo = SqlTableRepository(APPOINTMENTS)


def list_appointments_page(
    *,
    statut: str | None = None,
    client_id: str | None = None,
    employe_id: str | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    search: str | None = None,
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
        client_id=client_id,
        employe_id=employe_id,
    )


def get_appointment(appointment_id: str) -> dict[str, Any]:
    return _repo.get(appointment_id)


def create_appointment(payload: dict[str, Any], *, created_by: str | None) -> dict[str, Any]:
    values = {key: value for key, value in payload.items() if value is not None}
    values.setdefault("statut", "en_attente")
    values["created_by"] = created_by
    return _repo.insert(values)


def update_appointment(appointment_id: str, changes: dict[str, Any]) -> dict[str, Any]:
    return _repo.update(appointment_id, changes)


def set_status(appointment_id: str, statut: str, *, user_id: str | None) -> dict[str, Any]:
    with get_engine().begin() as conn:
        record = _repo.update_with(conn, appointment_id, {"statut": statut})
        audit.record_action(
            conn,
            user_id=user_id,
            action_type="appointment_status",
            table=APPOINTMENTS.table,
            target_id=appointment_id,
            description=f"Rendez-vous passé à « {STATUS_LABELS.get(statut, statut)} »",
        )
    return record


def delete_appointment(appointment_id: str) -> None:
    _repo.delete(appointment_id)
