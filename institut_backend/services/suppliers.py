from __future__ import annotations

from typing import Any

from institut_core.repositories.base import PagedResult, SqlTableRepository
from institut_core.repositories.tables import SUPPLIERS

_repo = SqlTableRepository(SUPPLIERS)


def list_suppliers_page(
    *,
    search: str | None = None,
    is_active: bool | None = None,
    page: int = 1,
    per_page: int = 20,
) -> PagedResult[dict[str, Any]]:
    return _repo.list_page(page=page, per_page=per_page, search=search, is_active=is_active)


def get_supplier(supplier_id: str) -> dict[str, Any]:
    return _repo.get(supplier_id)


def create_supplier(payload: dict[str, Any]) -> dict[str, Any]:
    values = {key: value for key, value in payload.items() if value is not None}
    values.setdefault("is_active", True)
    return _repo.insert(values)


def update_supplier(supplier_id: str, changes: dict[str, Any]) -> dict[str, Any]:
    return _repo.update(supplier_id, changes)


def delete_supplier(supplier_id: str) -> None:
    _repo.delete(supplier_id)
