from __future__ import annotations

from datetime import date, datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field, model_validator

from .common import PagingMeta, StrippedModel


class WorkerCreate(StrippedModel):
    first_name: str = Field(..., min_length=1, max_length=120)
    last_name: str = Field(..., min_length=1, max_length=120)
    phone: Optional[str] = None
    email: Optional[str] = None
    specialite: Optional[str] = None
    competence: List[str] = Field(default_factory=list)
    taux_horaire: Optional[float] = Field(default=None, ge=0)
    commission_rate: Optional[float] = Field(default=None, ge=0, le=100)
    is_active: bool = True
    date_embauche: Optional[date] = None
    notes: Optional[str] = None


class WorkerUpdate(StrippedModel):
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    phone: Optional[str] = None
    email: Optional[str] = None
    specialite: Optional[str] = None
    competence: Optional[List[str]] = None
    taux_horaire: Optional[float] = Field(default=None, ge=0)
    commission_rate: Optional[float] = Field(default=None, ge=0, le=100)
    is_active: Optional[bool] = None
    date_embauche: Optional[date] = None
    notes: Optional[str] = None
    rating_global: Optional[float] = Field(default=None, ge=0, le=5)


class WorkerActivity(StrippedModel):
    """Saisie du suivi : chaque montant positif alimente son historique."""

    salaire: Optional[float] = Field(default=None, ge=0, description="Nouveau salaire")
    jours_travailles: Optional[int] = Field(default=None, ge=0, description="Jours à ajouter")
    heures_travailles: Optional[float] = Field(default=None, ge=0, description="Heures à ajouter")
    montant_recu: Optional[float] = Field(default=None, ge=0, description="Paiement reçu")
    note: Optional[str] = None

    @model_validator(mode="after")
    def _something_to_record(self) -> "WorkerActivity":
        amounts = (self.salaire, self.jours_travailles, self.heures_travailles, self.montant_recu)
        if not any(value for value in amounts) and not self.note:
            raise ValueError("Aucune information à enregistrer")
        return self


class WorkerOut(BaseModel):
    id: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    specialite: Optional[str] = None
    competence: Optional[List[str]] = None
    taux_horaire: Optional[float] = None
    commission_rate: Optional[float] = None
    is_active: Optional[bool] = True
    date_embauche: Optional[date] = None
    notes: Optional[str] = None
    rating_global: Optional[float] = None
    total_services: Optional[int] = 0
    total_montants_recus: Optional[float] = 0
    jours_travailles: Optional[int] = 0
    heures_travailles: Optional[float] = 0
    salaire: Optional[float] = None
    salary_history: Optional[List[Any]] = None
    payments_history: Optional[List[Any]] = None
    work_history: Optional[List[Any]] = None
    notes_history: Optional[List[Any]] = None
    created_at: Optional[datetime] = None


class WorkerPage(BaseModel):
    items: List[WorkerOut]
    meta: PagingMeta
