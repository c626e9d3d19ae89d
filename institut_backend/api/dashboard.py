"""Dashboard endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from institut_backend.dependencies.security import require_roles
from institut_backend.schemas.dashboard import DashboardResponse
from institut_backend.services import dashboard as dashboard_service

router = APIRouter(
    prefix="/dashboard",
    tags=["dashboard"],
    dependencies=[Depends(require_roles("superadmin", "admin", "manager"))],
)


@router.get("/summary", response_model=DashboardResponse)
def get_dashboard_summary(days: int = Query(30, ge=1, le=365)):
    data = dashboard_service.build_summary(days=days)
    return DashboardResponse(**data)
