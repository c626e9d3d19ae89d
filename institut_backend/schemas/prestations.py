"""Schemas des prestations (table ``dd-services``)."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .common import PagingMeta, StrippedModel


class ServiceCreate(StrippedModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    category_id: Optional[str] = None
    price: float = Field(..., ge=0)
    duration_minutes: int = Field(60, gt=0)
    tags: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    is_active: bool = True


class ServiceUpdate(StrippedModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    category_id: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    duration_minutes: Optional[int] = Field(default=None, gt=0)
    tags: Optional[List[str]] = None
    images: Optional[List[str]] = None
    is_active: Optional[bool] = None


class ServiceOut(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    category_id: Optional[str] = None
    price: float = 0
    duration_minutes: Optional[int] = None
    tags: Optional[List[str]] = None
    images: Optional[List[str]] = None
    is_active: bool = True
    created_at: Optional[datetime] = None

    model_config = dict(from_attributes=True)


class ServicePage(BaseModel):
    items: List[ServiceOut]
    meta: PagingMeta
