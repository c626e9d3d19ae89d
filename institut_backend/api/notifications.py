"""Notification endpoints (``dd-notifications``), scoped to the caller."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from institut_backend.dependencies.paging import PageParams, page_params
from institut_backend.dependencies.security import AuthenticatedUser, get_current_user, require_roles
from institut_backend.schemas.notifications import (
    NotificationCreate,
    NotificationOut,
    NotificationPage,
    NotificationPriority,
    NotificationStatus,
    NotificationType,
)
from institut_backend.services import notifications as notification_service

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationPage)
def list_notifications(
    notification_type: Optional[NotificationType] = Query(default=None, alias="type"),
    status_filter: Optional[NotificationStatus] = Query(default=None, alias="status"),
    priority: Optional[NotificationPriority] = Query(default=None),
    paging: PageParams = Depends(page_params),
    user: AuthenticatedUser = Depends(get_current_user),
):
    result = notification_service.list_notifications_page(
        user_id=user.id,
        role=user.role,
        notification_type=notification_type,
        status=status_filter,
        priority=priority,
        page=paging.page,
        per_page=paging.per_page,
    )
    return NotificationPage(items=result.items, meta=result.meta())


@router.post("", response_model=NotificationOut, status_code=status.HTTP_201_CREATED)
def create_notification(
    payload: NotificationCreate,
    user: AuthenticatedUser = Depends(require_roles("superadmin", "admin", "manager")),
):
    return notification_service.create_notification(payload.model_dump(), user_id=user.id)


@router.patch("/{notification_id}/read", response_model=NotificationOut)
def mark_notification_read(notification_id: str, user: AuthenticatedUser = Depends(get_current_user)):
    try:
        return notification_service.mark_read(notification_id, user_id=user.id, role=user.role)
    except notification_service.NotificationForbidden as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc


@router.patch("/{notification_id}/archive", response_model=NotificationOut)
def archive_notification(notification_id: str, user: AuthenticatedUser = Depends(get_current_user)):
    try:
        return notification_service.archive(notification_id, user_id=user.id, role=user.role)
    except notification_service.NotificationForbidden as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc
