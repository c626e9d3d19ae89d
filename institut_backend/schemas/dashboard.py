"""Schemas for dashboard metrics."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel


class DashboardKPIs(BaseModel):
    utilisateurs_actifs: int
    clients_actifs: int
    produits_actifs: int
    prestations_actives: int
    ventes_total: float
    ventes_nombre: int
    revenus_total: float
    depenses_total: float
    rendez_vous: int
    stock_bas: int


class TopEntry(BaseModel):
    nom: str
    quantite_vendue: float
    chiffre_affaires: float


class DashboardResponse(BaseModel):
    days: int
    kpis: DashboardKPIs
    top_products: List[TopEntry]
    top_services: List[TopEntry]


__all__ = ['DashboardResponse', 'DashboardKPIs', 'TopEntry']
