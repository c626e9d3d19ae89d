from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from institut_core.code_generators import validate_barcode, validate_sku

from .common import PagingMeta, StrippedModel

CategoryType = Literal["product", "service"]
ProductStatus = Literal["active", "inactive", "archived"]


class CategoryCreate(StrippedModel):
    name: str = Field(..., min_length=1, max_length=120)
    description: Optional[str] = None
    type: CategoryType = "product"
    parent_id: Optional[str] = None
    is_active: bool = True


class CategoryUpdate(StrippedModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    description: Optional[str] = None
    type: Optional[CategoryType] = None
    parent_id: Optional[str] = None
    is_active: Optional[bool] = None


class CategoryOut(CategoryCreate):
    id: str
    created_at: Optional[datetime] = None

    model_config = dict(from_attributes=True)


class CategoryPage(BaseModel):
    items: List[CategoryOut]
    meta: PagingMeta


class _ProductCodes(StrippedModel):
    @field_validator("sku", check_fields=False)
    @classmethod
    def _check_sku(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.upper()
        if not validate_sku(value):
            raise ValueError("SKU attendu au format ABC-DEF-123")
        return value

    @field_validator("barcode", check_fields=False)
    @classmethod
    def _check_barcode(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not validate_barcode(value):
            raise ValueError("Code-barres attendu sur 13 chiffres")
        return value


class ProductCreate(_ProductCodes):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    category_id: Optional[str] = None
    brand: Optional[str] = Field(default=None, max_length=120)
    price: float = Field(0, ge=0)
    cost: Optional[float] = Field(default=None, ge=0)
    stock_quantity: int = Field(0, ge=0)
    sku: Optional[str] = None
    barcode: Optional[str] = None
    status: ProductStatus = "active"
    show_to_website: bool = False
    images: List[str] = Field(default_factory=list)
    is_active: bool = True


class ProductUpdate(_ProductCodes):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    category_id: Optional[str] = None
    brand: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    cost: Optional[float] = Field(default=None, ge=0)
    stock_quantity: Optional[int] = Field(default=None, ge=0)
    sku: Optional[str] = None
    barcode: Optional[str] = None
    status: Optional[ProductStatus] = None
    show_to_website: Optional[bool] = None
    images: Optional[List[str]] = None
    is_active: Optional[bool] = None


class ProductOut(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    category_id: Optional[str] = None
    brand: Optional[str] = None
    price: float = 0
    cost: Optional[float] = None
    stock_quantity: int = 0
    sku: Optional[str] = None
    barcode: Optional[str] = None
    status: Optional[str] = None
    show_to_website: Optional[bool] = None
    images: Optional[List[str]] = None
    is_active: bool = True
    created_at: Optional[datetime] = None

    model_config = dict(from_attributes=True)


class ProductPage(BaseModel):
    items: List[ProductOut]
    meta: PagingMeta


class StockIncrease(BaseModel):
    quantity: int = Field(..., gt=0)


class ProductAvailability(BaseModel):
    status: str
    label: str
    color: str


class WebsiteProduct(ProductOut):
    category: Optional[dict] = None
    availability: ProductAvailability
    formatted_price: str


class CodeSuggestion(BaseModel):
    code: str


__all__ = [
    "CategoryCreate",
    "CategoryOut",
    "CategoryPage",
    "CategoryUpdate",
    "CodeSuggestion",
    "ProductCreate",
    "ProductOut",
    "ProductPage",
    "ProductUpdate",
    "StockIncrease",
    "WebsiteProduct",
]
