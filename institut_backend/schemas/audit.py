"""Pydantic schemas for the activity log (``dd-actions``)."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from .common import PagingMeta


class ActionOut(BaseModel):
    id: str
    user_id: Optional[str] = None
    type: str
    cible_table: Optional[str] = None
    cible_id: Optional[str] = None
    description: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    date: Optional[datetime] = None


class ActionPage(BaseModel):
    items: List[ActionOut]
    meta: PagingMeta


__all__ = ["ActionOut", "ActionPage"]
