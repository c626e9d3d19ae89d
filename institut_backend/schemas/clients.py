from __future__ import annotations

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .common import PagingMeta, StrippedModel

ContactMethod = Literal["email", "phone", "sms"]


class ClientBase(StrippedModel):
    first_name: str = Field(..., min_length=1, max_length=120)
    last_name: str = Field(..., min_length=1, max_length=120)
    email: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=40)
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = "Mali"
    preferred_contact_method: ContactMethod = "phone"
    marketing_consent: bool = False
    notes: Optional[str] = None
    skin_type: Optional[str] = None
    allergies: Optional[str] = None


class ClientCreate(ClientBase):
    pass


class ClientUpdate(StrippedModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    email: Optional[str] = None
    phone: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    preferred_contact_method: Optional[ContactMethod] = None
    marketing_consent: Optional[bool] = None
    notes: Optional[str] = None
    skin_type: Optional[str] = None
    allergies: Optional[str] = None
    is_active: Optional[bool] = None


class ClientOut(ClientBase):
    id: str
    preferred_contact_method: Optional[str] = None
    marketing_consent: Optional[bool] = None
    total_spent: float = 0
    is_active: bool = True
    created_at: Optional[datetime] = None

    model_config = dict(from_attributes=True)


class ClientPage(BaseModel):
    items: List[ClientOut]
    meta: PagingMeta


class ClientHistory(BaseModel):
    client: ClientOut
    sales: List[dict]
    appointments: List[dict]


__all__ = ["ClientCreate", "ClientHistory", "ClientOut", "ClientPage", "ClientUpdate"]
