from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .common import PagingMeta, StrippedModel


class SupplierCreate(StrippedModel):
    name: str = Field(..., min_length=1, max_length=255)
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = "Mali"
    payment_terms: Optional[str] = None
    delivery_time: Optional[int] = Field(default=None, ge=0, description="Délai en jours")
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    is_active: bool = True
    notes: Optional[str] = None


class SupplierUpdate(StrippedModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None
    payment_terms: Optional[str] = None
    delivery_time: Optional[int] = Field(default=None, ge=0)
    rating: Optional[float] = Field(default=None, ge=0, le=5)
    is_active: Optional[bool] = None
    notes: Optional[str] = None


class SupplierOut(SupplierCreate):
    id: str
    created_at: Optional[datetime] = None


class SupplierPage(BaseModel):
    items: List[SupplierOut]
    meta: PagingMeta
