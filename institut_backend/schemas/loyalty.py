from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .common import PagingMeta, StrippedModel

LoyaltyTier = Literal["bronze", "silver", "gold", "platinum"]
CardStatus = Literal["active", "inactive", "suspended"]


class LoyaltyCardCreate(StrippedModel):
    client_id: str
    card_number: Optional[str] = None
    points_balance: int = Field(0, ge=0)
    tier: LoyaltyTier = "bronze"
    status: CardStatus = "active"


class LoyaltyCardUpdate(StrippedModel):
    points_balance: Optional[int] = Field(default=None, ge=0)
    tier: Optional[LoyaltyTier] = None
    status: Optional[CardStatus] = None


class LoyaltyVisit(BaseModel):
    amount: float = Field(..., ge=0, description="Montant dépensé lors de la visite (FCFA)")


class LoyaltyCardOut(BaseModel):
    id: str
    client_id: str
    card_number: str
    points_balance: int = 0
    tier: str = "bronze"
    status: str = "active"
    total_spent: float = 0
    total_visits: int = 0
    last_visit: Optional[datetime] = None
    created_at: Optional[datetime] = None


class LoyaltyCardPage(BaseModel):
    items: List[LoyaltyCardOut]
    meta: PagingMeta
