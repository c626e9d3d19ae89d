from __future__ import annotations

from typing import Any

from sqlalchemy import text

from institut_core.data_repository import get_engine
from institut_core.repositories.base import PagedResult, SqlTableRepository, row_to_dict
from institut_core.repositories.tables import APPOINTMENTS, CLIENTS, SALES

_clients = SqlTableRepository(CLIENTS)

CLIENT_DEFAULTS: dict[str, Any] = {
    "country": "Mali",
    "preferred_contact_method": "phone",
    "marketing_consent": False,
    "total_spent": 0,
    "is_active": True,
}


def list_clients_page(
    *,
    search: str | None = None,
    is_active: bool | None = None,
    page: int = 1,
    per_page: int = 20,
) -> PagedResult[dict[str, Any]]:
    return _clients.list_page(page=page, per_page=per_page, search=search, is_active=is_active)


def get_client(client_id: str) -> dict[str, Any]:
    return _clients.get(client_id)


def create_client(payload: dict[str, Any]) -> dict[str, Any]:
    values = {**CLIENT_DEFAULTS, **{key: value for key, value in payload.items() if value is not None}}
    return _clients.insert(values)


def update_client(client_id: str, changes: dict[str, Any]) -> dict[str, Any]:
    return _clients.update(client_id, changes)


def delete_client(client_id: str) -> None:
    _clients.delete(client_id)


def get_client_history(client_id: str, *, limit: int = 50) -> dict[str, Any]:
    """Fiche client avec ses dernières ventes et rendez-vous."""
    with get_engine().begin() as conn:
        client = _clients.fetch_by_id(conn, client_id)
        sales = conn.execute(
            text(
                f"""
                SELECT {SALES.select_columns}
                FROM {SALES.quoted}
                WHERE client_id = :client_id
                ORDER BY date DESC
                LIMIT :limit
                """
            ),
            {"client_id": client_id, "limit": limit},
        ).fetchall()
        appointments = conn.execute(
            text(
                f"""
                SELECT {APPOINTMENTS.select_columns}
                FROM {APPOINTMENTS.quoted}
                WHERE client_id = :client_id
                ORDER BY date_rdv DESC
                LIMIT :limit
                """
            ),
            {"client_id": client_id, "limit": limit},
        ).fetchall()
    return {
        "client": client,
        "sales": [row_to_dict(row) for row in sales],
        "appointments": [row_to_dict(row) for row in appointments],
    }
