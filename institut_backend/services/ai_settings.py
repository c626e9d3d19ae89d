"""Préférences IA par utilisateur (``dd-ai-settings``, une ligne par utilisateur)."""

from __future__ import annotations

from typing import Any

from sqlalchemy import text

from institut_core.data_repository import get_engine
from institut_core.repositories.base import row_to_dict
from institut_core.repositories.tables import AI_SETTINGS

DEFAULT_AI_SETTINGS: dict[str, bool] = {
    "voice_navigation_enabled": False,
    "product_recommendation_enabled": True,
    "skin_analysis_enabled": True,
    "business_query_enabled": True,
    "business_query_vocal_response_enabled": False,
}

_FLAGS = tuple(DEFAULT_AI_SETTINGS)


def _upsert(conn, user_id: str, values: dict[str, bool]) -> dict[str, Any]:
    columns = ", ".join(("user_id",) + _FLAGS)
    placeholders = ", ".join(f":{col}" for col in ("user_id",) + _FLAGS)
    updates = ", ".join(f"{col} = EXCLUDED.{col}" for col in _FLAGS)
    row = conn.execute(
        text(
            f"""
            INSERT INTO {AI_SETTINGS.quoted} ({columns})
            VALUES ({placeholders})
            ON CONFLICT (user_id) DO UPDATE SET {updates}
            RETURNING {AI_SETTINGS.select_columns}
            """
        ),
        {"user_id": user_id, **values},
    ).fetchone()
    return row_to_dict(row)


def get_settings(user_id: str) -> dict[str, Any]:
    """Retourne les préférences, en créant la ligne par défaut si elle manque."""
    with get_engine().begin() as conn:
        row = conn.execute(
            text(f"SELECT {AI_SETTINGS.select_columns} FROM {AI_SETTINGS.quoted} WHERE user_id = :user_id"),
            {"user_id": user_id},
        ).fetchone()
        if row is not None:
            return row_to_dict(row)
        return _upsert(conn, user_id, dict(DEFAULT_AI_SETTINGS))


def save_settings(user_id: str, values: dict[str, Any]) -> dict[str, Any]:
    merged = {flag: bool(values.get(flag, DEFAULT_AI_SETTINGS[flag])) for flag in _FLAGS}
    with get_engine().begin() as conn:
        return _upsert(conn, user_id, merged)
