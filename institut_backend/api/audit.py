"""Activity log endpoints (``dd-actions``), reserved to administrators."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from institut_backend.dependencies.security import require_roles
from institut_backend.schemas.audit import ActionPage
from institut_backend.services import audit as audit_service

router = APIRouter(
    prefix="/actions",
    tags=["audit"],
    dependencies=[Depends(require_roles("admin", "superadmin"))],
)


@router.get("", response_model=ActionPage)
def list_actions(
    type: Optional[str] = Query(default=None, description="Type d'action (ex. stock_reception)"),
    user_id: Optional[str] = Query(default=None),
    table: Optional[str] = Query(default=None, description="Table ciblée"),
    search: Optional[str] = Query(default=None),
    page: int = Query(1, ge=1),
):
    result = audit_service.list_actions_page(
        action_type=type,
        user_id=user_id,
        table=table,
        search=search,
        page=page,
        per_page=audit_service.AUDIT_PAGE_SIZE,
    )
    return ActionPage(items=result.items, meta=result.meta())
