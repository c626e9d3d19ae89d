"""Finance schemas: dépenses, revenus et synthèse."""

from __future__ import annotations

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, Field

from .common import PagingMeta, StrippedModel


class ExpenseCreate(StrippedModel):
    categorie: str = Field(..., min_length=1, max_length=120)
    montant: float = Field(..., gt=0, description="Montant en FCFA")
    date: dt.date = Field(default_factory=dt.date.today)
    fournisseur_id: Optional[str] = None
    note: Optional[str] = None


class ExpenseUpdate(StrippedModel):
    categorie: Optional[str] = Field(default=None, min_length=1, max_length=120)
    montant: Optional[float] = Field(default=None, gt=0)
    date: Optional[dt.date] = None
    fournisseur_id: Optional[str] = None
    note: Optional[str] = None


class ExpenseOut(BaseModel):
    id: str
    categorie: str
    montant: float
    date: dt.date
    fournisseur_id: Optional[str] = None
    note: Optional[str] = None
    enregistre_par: Optional[str] = None


class ExpensePage(BaseModel):
    items: List[ExpenseOut]
    meta: PagingMeta


class RevenueCreate(StrippedModel):
    type: str = Field(..., min_length=1, max_length=60)
    source_id: Optional[str] = None
    montant: float = Field(..., gt=0)
    date: dt.date = Field(default_factory=dt.date.today)
    note: Optional[str] = None


class RevenueUpdate(StrippedModel):
    type: Optional[str] = Field(default=None, min_length=1, max_length=60)
    source_id: Optional[str] = None
    montant: Optional[float] = Field(default=None, gt=0)
    date: Optional[dt.date] = None
    note: Optional[str] = None


class RevenueOut(BaseModel):
    id: str
    type: str
    source_id: Optional[str] = None
    montant: float
    date: dt.date
    note: Optional[str] = None
    enregistre_par: Optional[str] = None


class RevenuePage(BaseModel):
    items: List[RevenueOut]
    meta: PagingMeta


class FinanceSummary(BaseModel):
    start: dt.date
    end: dt.date
    sales_total: float
    sales_count: int
    revenues_total: float
    expenses_total: float
    profit: float
    expenses_by_category: dict[str, float] = Field(default_factory=dict)
