from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from .common import PagingMeta

SaleStatus = Literal["paye", "annule", "en_attente", "rembourse"]
SaleType = Literal["produit", "service", "mixte"]


class SaleLine(BaseModel):
    product_id: Optional[str] = None
    service_id: Optional[str] = None
    quantite: int = Field(..., gt=0)
    prix_unitaire: float = Field(..., ge=0)

    @model_validator(mode="after")
    def _one_target(self) -> "SaleLine":
        if bool(self.product_id) == bool(self.service_id):
            raise ValueError("Chaque ligne référence soit un produit soit une prestation")
        return self


class SaleCreate(BaseModel):
    client_id: Optional[str] = None
    date: Optional[datetime] = None
    reduction: float = Field(0, ge=0)
    methode_paiement: Optional[str] = "especes"
    status: SaleStatus = "paye"
    items: List[SaleLine] = Field(..., min_length=1)


class SaleStatusUpdate(BaseModel):
    status: SaleStatus


class SaleItemOut(BaseModel):
    id: str
    vente_id: str
    product_id: Optional[str] = None
    service_id: Optional[str] = None
    quantite: int
    prix_unitaire: float


class SaleOut(BaseModel):
    id: str
    client_id: Optional[str] = None
    user_id: Optional[str] = None
    date: datetime
    type: Optional[str] = None
    total_brut: float = 0
    reduction: float = 0
    total_net: float = 0
    methode_paiement: Optional[str] = None
    status: str


class SaleDetail(SaleOut):
    items: List[SaleItemOut] = Field(default_factory=list)


class SalePage(BaseModel):
    items: List[SaleOut]
    meta: PagingMeta
