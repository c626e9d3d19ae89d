"""Prestations de l'institut (table ``dd-services``)."""

from __future__ import annotations

from typing import Any

from institut_core.repositories.base import PagedResult, SqlTableRepository
from institut_core.repositories.tables import SERVICES

_repo = SqlTableRepository(SERVICES)


def list_services_page(
    *,
    search: str | None = None,
    category_id: str | None = None,
    is_active: bool | None = None,
    page: int = 1,
    per_page: int = 20,
) -> PagedResult[dict[str, Any]]:
    return _repo.list_page(page=page, per_page=per_page, search=search, category_id=category_id, is_active=is_active)


def get_service(service_id: str) -> dict[str, Any]:
    return _repo.get(service_id)


def create_service(payload: dict[str, Any], *, created_by: str | None) -> dict[str, Any]:
    return _repo.insert({**payload, "created_by": created_by})


def update_service(service_id: str, changes: dict[str, Any]) -> dict[str, Any]:
    return _repo.update(service_id, changes)


def delete_service(service_id: str) -> None:
    _repo.delete(service_id)
