from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .common import PagingMeta, StrippedModel

AppointmentStatus = Literal["en_attente", "confirme", "termine", "annule", "no_show"]


class AppointmentCreate(StrippedModel):
    client_id: Optional[str] = None
    service_id: Optional[str] = None
    employe_id: Optional[str] = None
    date_rdv: datetime
    duree: int = Field(60, gt=0, description="Durée en minutes")
    statut: AppointmentStatus = "en_attente"
    note: Optional[str] = None


class AppointmentUpdate(StrippedModel):
    client_id: Optional[str] = None
    service_id: Optional[str] = None
    employe_id: Optional[str] = None
    date_rdv: Optional[datetime] = None
    duree: Optional[int] = Field(default=None, gt=0)
    statut: Optional[AppointmentStatus] = None
    note: Optional[str] = None


class AppointmentStatusUpdate(BaseModel):
    statut: AppointmentStatus


class AppointmentOut(BaseModel):
    id: str
    client_id: Optional[str] = None
    service_id: Optional[str] = None
    employe_id: Optional[str] = None
    date_rdv: datetime
    duree: Optional[int] = None
    statut: str
    note: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = dict(from_attributes=True)


class AppointmentPage(BaseModel):
    items: List[AppointmentOut]
    meta: PagingMeta


__all__ = [
    "AppointmentCreate",
    "AppointmentOut",
    "AppointmentPage",
    "AppointmentStatus",
    "AppointmentStatusUpdate",
    "AppointmentUpdate",
]
