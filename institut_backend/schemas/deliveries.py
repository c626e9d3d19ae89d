from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from .common import PagingMeta, StrippedModel

DeliveryStatus = Literal["en_preparation", "expedie", "livre", "annule", "retourne"]
DeliveryMode = Literal["interne", "externe"]


class DeliveryCreate(StrippedModel):
    vente_id: Optional[str] = None
    client_id: Optional[str] = None
    adresse: str = Field(..., min_length=1)
    mode: DeliveryMode = "interne"
    livreur_id: Optional[str] = Field(default=None, description="Employé livreur (mode interne)")
    livreur_name: Optional[str] = Field(default=None, description="Livreur externe")
    date_livraison: Optional[datetime] = None
    frais: float = Field(0, ge=0)
    preuve_photo: Optional[str] = None
    note: Optional[str] = None


class DeliveryUpdate(StrippedModel):
    vente_id: Optional[str] = None
    client_id: Optional[str] = None
    adresse: Optional[str] = Field(default=None, min_length=1)
    mode: Optional[DeliveryMode] = None
    livreur_id: Optional[str] = None
    livreur_name: Optional[str] = None
    statut: Optional[DeliveryStatus] = None
    date_livraison: Optional[datetime] = None
    frais: Optional[float] = Field(default=None, ge=0)
    preuve_photo: Optional[str] = None
    note: Optional[str] = None


class DeliveryStatusUpdate(BaseModel):
    statut: DeliveryStatus


class DeliveryOut(BaseModel):
    id: str
    vente_id: Optional[str] = None
    client_id: Optional[str] = None
    adresse: Optional[str] = None
    mode: Optional[str] = None
    livreur_id: Optional[str] = None
    livreur_name: Optional[str] = None
    statut: Optional[str] = "en_preparation"
    date_livraison: Optional[datetime] = None
    frais: Optional[float] = 0
    preuve_photo: Optional[str] = None
    note: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None


class DeliveryPage(BaseModel):
    items: List[DeliveryOut]
    meta: PagingMeta
