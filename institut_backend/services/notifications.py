"""Notifications internes (``dd-notifications``).

Une notification vise un utilisateur (``target_user_id``), un rôle
(``target_role``) ou tout le monde quand les deux sont vides. Les
administrateurs voient l'ensemble des notifications.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import text

from institut_core.data_repository import get_engine
from institut_core.permissions import normalize_role
from institut_core.repositories.base import PagedResult, SqlTableRepository, normalize_paging, row_to_dict
from institut_core.repositories.tables import NOTIFICATIONS

logger = logging.getLogger(__name__)

_ADMIN_ROLES = {"admin", "superadmin"}

_repo = SqlTableRepository(NOTIFICATIONS)


class NotificationForbidden(PermissionError):
    pass


def _audience_clause(user_id: str, role: str) -> tuple[str, dict[str, Any]]:
    if normalize_role(role) in _ADMIN_ROLES:
        return "", {}
    return (
        "(target_user_id = :user_id OR target_role = :role "
        "OR (target_user_id IS NULL AND target_role IS NULL))",
        {"user_id": user_id, "role": normalize_role(role)},
    )


def is_visible(notification: dict[str, Any], user_id: str, role: str) -> bool:
    role = normalize_role(role)
    if role in _ADMIN_ROLES:
        return True
    target_user, target_role = notification.get("target_user_id"), notification.get("target_role")
    if target_user is None and target_role is None:
        return True
    return target_user == user_id or target_role == role


def list_notifications_page(
    *,
    user_id: str,
    role: str,
    notification_type: str | None = None,
    status: str | None = None,
    priority: str | None = None,
    page: int = 1,
    per_page: int = 20,
) -> PagedResult[dict[str, Any]]:
    page, per_page, offset = normalize_paging(page, per_page)
    audience, params = _audience_clause(user_id, role)
    clauses = [audience] if audience else []
    for column, value in (("type", notification_type), ("status", status), ("priority", priority)):
        if value is not None:
            clauses.append(f"{column} = :f_{column}")
            params[f"f_{column}"] = value
    where_sql = ("WHERE " + " AND ".join(clauses)) if clauses else ""
    table = NOTIFICATIONS.quoted

    with get_engine().begin() as conn:
        count_row = conn.execute(text(f"SELECT COUNT(*) FROM {table} {where_sql}"), params).fetchone()
        total = int(count_row[0] if count_row else 0)
        rows = conn.execute(
            text(
                f"SELECT {NOTIFICATIONS.select_columns} FROM {table} {where_sql} "
                f"ORDER BY created_at DESC LIMIT :limit OFFSET :offset"
            ),
            {**params, "limit": per_page, "offset": offset},
        ).fetchall()

    return PagedResult(items=[row_to_dict(row) for row in rows], total=total, page=page, per_page=per_page)


def create_notification(payload: dict[str, Any], *, user_id: str | None) -> dict[str, Any]:
    values = {key: value for key, value in payload.items() if value is not None}
    if values.get("target_role"):
        values["target_role"] = normalize_role(values["target_role"])
    if values.get("metadata") is not None:
        values["metadata"] = json.dumps(values["metadata"], ensure_ascii=False)
    values["status"] = "unread"
    values["created_by"] = user_id
    record = _repo.insert(values)
    logger.info("Notification %s créée (%s)", record.get("id"), values.get("type"))
    return record


def _transition(notification_id: str, changes: dict[str, Any], *, user_id: str, role: str) -> dict[str, Any]:
    with get_engine().begin() as conn:
        current = _repo.fetch_by_id(conn, notification_id, for_update=True)
        if not is_visible(current, user_id, role):
            raise NotificationForbidden("Cette notification ne vous est pas destinée.")
        return _repo.update_with(conn, notification_id, changes)


def mark_read(notification_id: str, *, user_id: str, role: str) -> dict[str, Any]:
    return _transition(
        notification_id,
        {"status": "read", "read_at": datetime.now(timezone.utc)},
        user_id=user_id,
        role=role,
    )


def archive(notification_id: str, *, user_id: str, role: str) -> dict[str, Any]:
    return _transition(notification_id, {"status": "archived"}, user_id=user_id, role=role)
