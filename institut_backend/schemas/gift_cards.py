from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from institut_core.code_generators import normalize_gift_card_code

from .common import PagingMeta, StrippedModel


class GiftCardCreate(StrippedModel):
    code: Optional[str] = Field(default=None, max_length=40)
    initial_amount: float = Field(..., gt=0)
    client_id: Optional[str] = None
    purchased_by: Optional[str] = None
    expiry_date: Optional[date] = None
    notes: Optional[str] = None

    @field_validator("code")
    @classmethod
    def _normalize_code(cls, value: Optional[str]) -> Optional[str]:
        return normalize_gift_card_code(value) if value else None


class GiftCardUpdate(StrippedModel):
    client_id: Optional[str] = None
    expiry_date: Optional[date] = None
    status: Optional[str] = None
    notes: Optional[str] = None


class GiftCardRedeem(BaseModel):
    amount: float = Field(..., gt=0)
    notes: Optional[str] = None


class GiftCardTransactionOut(BaseModel):
    id: str
    gift_card_id: str
    amount: float
    balance_before: float
    balance_after: float
    transaction_type: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class GiftCardOut(BaseModel):
    id: str
    code: str
    initial_amount: float
    current_balance: float
    client_id: Optional[str] = None
    purchased_by: Optional[str] = None
    expiry_date: Optional[date] = None
    status: str
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class GiftCardDetail(GiftCardOut):
    transactions: List[GiftCardTransactionOut] = Field(default_factory=list)


class GiftCardPage(BaseModel):
    items: List[GiftCardOut]
    meta: PagingMeta
