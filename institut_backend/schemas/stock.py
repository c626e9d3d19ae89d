"""Schemas for stock receptions (``dd-stocks``) and their items."""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from institut_core.code_generators import validate_stock_ref

from .common import PagingMeta, StrippedModel


class StockItemLine(StrippedModel):
    product_id: str
    quantity: int = Field(..., gt=0)
    cost_per_unit: float = Field(0, ge=0)
    expiry_date: Optional[date] = None
    notes: Optional[str] = None


class StockCreate(StrippedModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    stock_ref: Optional[str] = None
    status: str = "active"
    is_active: bool = True
    items: List[StockItemLine] = Field(default_factory=list)

    @field_validator("stock_ref")
    @classmethod
    def _check_ref(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not validate_stock_ref(value):
            raise ValueError("Référence attendue au format STK-AAAAMMJJ-NNL")
        return value


class StockUpdate(StrippedModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[str] = None
    is_active: Optional[bool] = None


class StockItemsRequest(BaseModel):
    items: List[StockItemLine] = Field(..., min_length=1)


class StockItemOut(BaseModel):
    id: str
    stock_id: str
    product_id: str
    quantity: int
    batch_code: Optional[str] = None
    cost_per_unit: Optional[float] = None
    total_cost: Optional[float] = None
    expiry_date: Optional[date] = None
    notes: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None


class StockOut(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    stock_ref: str
    status: Optional[str] = None
    is_active: bool = True
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None


class StockDetail(StockOut):
    items: List[StockItemOut] = Field(default_factory=list)


class StockPage(BaseModel):
    items: List[StockOut]
    meta: PagingMeta


class LowStockProduct(BaseModel):
    id: str
    name: str
    sku: Optional[str] = None
    stock_quantity: int


class LowStockResponse(BaseModel):
    threshold: int
    items: List[LowStockProduct]
