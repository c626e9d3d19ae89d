from __future__ import annotations

from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field

from .common import PagingMeta, StrippedModel

NotificationType = Literal["info", "warning", "error", "success"]
NotificationPriority = Literal["low", "medium", "high", "urgent"]
NotificationStatus = Literal["unread", "read", "archived"]


class NotificationCreate(StrippedModel):
    title: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    type: NotificationType = "info"
    priority: NotificationPriority = "medium"
    target_user_id: Optional[str] = None
    target_role: Optional[str] = None
    related_entity_type: Optional[str] = None
    related_entity_id: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None


class NotificationOut(BaseModel):
    id: str
    title: str
    message: str
    type: Optional[str] = "info"
    priority: Optional[str] = "medium"
    status: Optional[str] = "unread"
    target_user_id: Optional[str] = None
    target_role: Optional[str] = None
    related_entity_type: Optional[str] = None
    related_entity_id: Optional[str] = None
    metadata: Optional[Any] = None
    read_at: Optional[datetime] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None


class NotificationPage(BaseModel):
    items: List[NotificationOut]
    meta: PagingMeta
