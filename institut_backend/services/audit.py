"""Journal d'activité (table ``dd-actions``)."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.engine import Connection

from institut_core.repositories.base import PagedResult, SqlTableRepository
from institut_core.repositories.tables import ACTIONS

logger = logging.getLogger(__name__)

AUDIT_PAGE_SIZE = 50

_repo = SqlTableRepository(ACTIONS)


def record_action(
    conn: Connection,
    *,
    user_id: str | None,
    action_type: str,
    table: str,
    target_id: str | None,
    description: str,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> dict[str, Any]:
    """Écrit une entrée de journal dans la transaction courante."""
    entry = _repo.insert_with(
        conn,
        {
            "user_id": user_id,
            "type": action_type,
            "cible_table": table,
            "cible_id": target_id,
            "description": description,
            "ip_address": ip_address,
            "user_agent": user_agent,
            "date": datetime.now(timezone.utc),
        },
    )
    logger.info("action %s sur %s/%s par %s", action_type, table, target_id, user_id)
    return entry


def list_actions_page(
    *,
    action_type: str | None = None,
    user_id: str | None = None,
    table: str | None = None,
    search: str | None = None,
    page: int = 1,
    per_page: int = AUDIT_PAGE_SIZE,
) -> PagedResult[dict[str, Any]]:
    return _repo.list_page(
        page=page,
        per_page=per_page,
        search=search,
        type=action_type,
        user_id=user_id,
        cible_table=table,
    )
