from __future__ import annotations

from datetime import date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .common import PagingMeta, StrippedModel

Role = Literal["superadmin", "admin", "manager", "caissiere", "employee"]


class UserCreateRequest(StrippedModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=6)
    pseudo: Optional[str] = Field(default=None, max_length=60)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    role: Role = "employee"
    hire_date: Optional[date] = None

    @field_validator("email")
    @classmethod
    def _lower_email(cls, value: str) -> str:
        if "@" not in value:
            raise ValueError("Email invalide")
        return value.lower()


class UserUpdate(StrippedModel):
    pseudo: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[Role] = None
    salary: Optional[float] = Field(default=None, ge=0)
    hire_date: Optional[date] = None
    is_active: Optional[bool] = None


class UserOut(BaseModel):
    id: str
    auth_user_id: Optional[str] = None
    email: str
    pseudo: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    role: str
    salary: Optional[float] = None
    hire_date: Optional[date] = None
    is_active: bool = True
    created_at: Optional[datetime] = None


class UserPage(BaseModel):
    items: List[UserOut]
    meta: PagingMeta


class UserCreateResponse(BaseModel):
    success: bool
    user: UserOut
    message: str
