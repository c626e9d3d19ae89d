from __future__ import annotations

import re
from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from .common import PagingMeta, StrippedModel

PromotionType = Literal["percentage", "fixed_amount", "buy_x_get_y", "free_shipping"]
PromotionScope = Literal["all", "products", "services", "specific_items"]
PromotionState = Literal["active", "scheduled", "expired", "inactive"]

PROMO_CODE_PATTERN = re.compile(r"^[A-Z0-9]{3,20}$")


def _normalize_code(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    code = value.upper()
    if not PROMO_CODE_PATTERN.match(code):
        raise ValueError("Le code doit contenir 3 à 20 lettres ou chiffres")
    return code


def _zero_as_none(value: Optional[float]) -> Optional[float]:
    return value or None


class PromotionCreate(StrippedModel):
    name: str = Field(..., min_length=1, max_length=255)
    code: str
    description: Optional[str] = None
    type: PromotionType = "percentage"
    value: float = Field(0, ge=0)
    min_purchase_amount: Optional[float] = Field(default=None, ge=0)
    max_discount_amount: Optional[float] = Field(default=None, ge=0)
    start_date: datetime
    end_date: datetime
    is_active: bool = True
    applicable_to: PromotionScope = "all"
    applicable_items: List[str] = Field(default_factory=list)
    customer_segments: List[str] = Field(default_factory=list)
    usage_limit: Optional[int] = Field(default=None, ge=0, description="0 ou vide : illimité")
    is_unique_usage: bool = False
    conditions: Optional[dict[str, Any]] = None

    @field_validator("code")
    @classmethod
    def _upper_code(cls, value: str) -> str:
        return _normalize_code(value)

    @field_validator("min_purchase_amount", "max_discount_amount", "usage_limit")
    @classmethod
    def _unlimited_when_zero(cls, value):
        return _zero_as_none(value)

    @model_validator(mode="after")
    def _check_window_and_value(self) -> "PromotionCreate":
        if self.start_date >= self.end_date:
            raise ValueError("La date de fin doit être postérieure à la date de début")
        if self.type == "percentage" and self.value > 100:
            raise ValueError("Un pourcentage ne peut pas dépasser 100")
        return self


class PromotionUpdate(StrippedModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    code: Optional[str] = None
    description: Optional[str] = None
    type: Optional[PromotionType] = None
    value: Optional[float] = Field(default=None, ge=0)
    min_purchase_amount: Optional[float] = Field(default=None, ge=0)
    max_discount_amount: Optional[float] = Field(default=None, ge=0)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_active: Optional[bool] = None
    applicable_to: Optional[PromotionScope] = None
    applicable_items: Optional[List[str]] = None
    customer_segments: Optional[List[str]] = None
    usage_limit: Optional[int] = Field(default=None, ge=0)
    is_unique_usage: Optional[bool] = None
    conditions: Optional[dict[str, Any]] = None

    @field_validator("code")
    @classmethod
    def _upper_code(cls, value: Optional[str]) -> Optional[str]:
        return _normalize_code(value)


class PromotionOut(BaseModel):
    id: str
    name: str
    code: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = "percentage"
    value: Optional[float] = 0
    min_purchase_amount: Optional[float] = None
    max_discount_amount: Optional[float] = None
    start_date: datetime
    end_date: datetime
    is_active: Optional[bool] = True
    applicable_to: Optional[str] = "all"
    applicable_items: Optional[List[str]] = None
    customer_segments: Optional[List[str]] = None
    usage_limit: Optional[int] = None
    usage_count: Optional[int] = 0
    is_unique_usage: Optional[bool] = False
    conditions: Optional[Any] = None
    state: PromotionState
    created_at: Optional[datetime] = None


class PromotionPage(BaseModel):
    items: List[PromotionOut]
    meta: PagingMeta


class PromotionStats(BaseModel):
    total: int
    active: int
    scheduled: int
    expired: int
