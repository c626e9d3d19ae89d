"""Promotions et codes promo (``dd-promotions``)."""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, time, timezone
from typing import Any

from sqlalchemy import text

from institut_core.data_repository import get_engine
from institut_core.repositories.base import PagedResult, SqlTableRepository
from institut_core.repositories.tables import PROMOTIONS

logger = logging.getLogger(__name__)

_repo = SqlTableRepository(PROMOTIONS)


class PromotionError(ValueError):
    pass


class DuplicatePromotionCode(PromotionError):
    pass


def _as_aware(value: datetime | date | str) -> datetime:
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    elif not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def promotion_state(promotion: dict[str, Any], now: datetime | None = None) -> str:
    """``inactive`` si désactivée, sinon ``scheduled`` / ``active`` / ``expired`` selon la fenêtre."""
    now = _as_aware(now or datetime.now(timezone.utc))
    if not promotion.get("is_active"):
        return "inactive"
    if now < _as_aware(promotion["start_date"]):
        return "scheduled"
    if now > _as_aware(promotion["end_date"]):
        return "expired"
    return "active"


def _with_state(promotion: dict[str, Any], now: datetime | None = None) -> dict[str, Any]:
    promotion["state"] = promotion_state(promotion, now)
    return promotion


def _encode(values: dict[str, Any]) -> dict[str, Any]:
    # colonne jsonb
    if values.get("conditions") is not None:
        values["conditions"] = json.dumps(values["conditions"], ensure_ascii=False)
    return values


def list_promotions_page(
    *,
    search: str | None = None,
    is_active: bool | None = None,
    promotion_type: str | None = None,
    page: int = 1,
    per_page: int = 20,
) -> PagedResult[dict[str, Any]]:
    result = _repo.list_page(page=page, per_page=per_page, search=search, is_active=is_active, type=promotion_type)
    now = datetime.now(timezone.utc)
    result.items = [_with_state(item, now) for item in result.items]
    return result


def get_promotion(promotion_id: str) -> dict[str, Any]:
    return _with_state(_repo.get(promotion_id))


def create_promotion(payload: dict[str, Any]) -> dict[str, Any]:
    values = {key: value for key, value in payload.items() if value is not None}
    values.setdefault("is_active", True)
    values["usage_count"] = 0
    with get_engine().begin() as conn:
        if _repo.find_by(conn, "code", values["code"]):
            raise DuplicatePromotionCode(f"Le code {values['code']} est déjà utilisé.")
        record = _repo.insert_with(conn, _encode(values))
    logger.info("Promotion %s créée (%s)", values["code"], values.get("type"))
    return _with_state(record)


def update_promotion(promotion_id: str, changes: dict[str, Any]) -> dict[str, Any]:
    with get_engine().begin() as conn:
        current = _repo.fetch_by_id(conn, promotion_id, for_update=True)
        start = changes.get("start_date") or current.get("start_date")
        end = changes.get("end_date") or current.get("end_date")
        if start and end and _as_aware(start) >= _as_aware(end):
            raise PromotionError("La date de fin doit être postérieure à la date de début.")
        code = changes.get("code")
        if code and code != current.get("code"):
            if any(row["id"] != current["id"] for row in _repo.find_by(conn, "code", code)):
                raise DuplicatePromotionCode(f"Le code {code} est déjà utilisé.")
        record = _repo.update_with(conn, promotion_id, _encode(dict(changes)))
    return _with_state(record)


def delete_promotion(promotion_id: str) -> None:
    _repo.delete(promotion_id)


def promotion_stats(now: datetime | None = None) -> dict[str, int]:
    """Compteurs du tableau des promotions ; ``expired`` ignore ``is_active``."""
    now = now or datetime.now(timezone.utc)
    sql = text(
        f"""
        SELECT COUNT(*) AS total,
               COUNT(*) FILTER (WHERE is_active AND start_date <= :now AND end_date >= :now) AS active,
               COUNT(*) FILTER (WHERE is_active AND start_date > :now) AS scheduled,
               COUNT(*) FILTER (WHERE end_date < :now) AS expired
        FROM {PROMOTIONS.quoted}
        """
    )
    with get_engine().begin() as conn:
        row = conn.execute(sql, {"now": now}).fetchone()
    data = dict(row._mapping) if row is not None else {}
    return {key: int(data.get(key) or 0) for key in ("total", "active", "scheduled", "expired")}
