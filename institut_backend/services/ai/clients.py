"""Analyse de profil client."""

from __future__ import annotations

import logging
from typing import Any

import pandas as pd

from institut_core import gemini_client
from institut_core.data_repository import df_records

from . import data
from .common import AIRequestError, AIResourceNotFound, to_prompt_json

logger = logging.getLogger(__name__)

VIP_SPENDING = 100_000
REGULAR_VISITS = 10
LOYAL_VISITS = 5


def client_statistics(sales: pd.DataFrame, appointments: pd.DataFrame) -> dict[str, Any]:
    total_spent = 0.0
    if not sales.empty:
        total_spent = float(pd.to_numeric(sales["total_net"], errors="coerce").fillna(0).sum())
    total_visits = len(sales) + len(appointments)
    last_visit = None
    if not sales.empty:
        last_visit = sales.iloc[0]["date"]
    elif not appointments.empty:
        last_visit = appointments.iloc[0]["date_rdv"]
    return {
        "totalSpent": total_spent,
        "totalVisits": total_visits,
        "averageBasket": total_spent / len(sales) if len(sales) else 0.0,
        "lastVisitDate": last_visit,
    }


def classify_client(total_spent: float, total_visits: int) -> str:
    if total_spent > VIP_SPENDING:
        return "VIP"
    if total_visits > REGULAR_VISITS:
        return "Regular"
    return "Occasional"


def fallback_profile(stats: dict[str, Any]) -> dict[str, Any]:
    visits = stats["totalVisits"]
    loyal = visits > LOYAL_VISITS
    return {
        "behavioralProfile": {
            "clientType": classify_client(stats["totalSpent"], visits),
            "purchasePattern": "Client avec historique d'achats réguliers",
            "loyaltyLevel": "High" if loyal else "Medium",
            "engagementScore": min(100, visits * 10),
        },
        "preferences": {
            "favoriteCategories": [],
            "preferredProductTypes": [],
            "spendingBehavior": f"Panier moyen de {stats['averageBasket']:.0f} FCFA",
        },
        "personalizedRecommendations": [],
        "futureNeeds": [],
        "churnRisk": {
            "score": 20 if loyal else 50,
            "level": "Low" if loyal else "Medium",
            "factors": [],
            "preventionActions": [],
        },
        "insights": [],
        "recommendations": [],
    }


def _recent_sales(sales: pd.DataFrame, items: pd.DataFrame, limit: int = 5) -> list[dict[str, Any]]:
    recent = []
    for _, sale in sales.head(limit).iterrows():
        lines = items[items["vente_id"].astype(str) == str(sale["id"])] if not items.empty else items
        recent.append({
            "date": sale["date"],
            "total": sale["total_net"],
            "items": [
                {
                    "product": line.get("product_name"),
                    "service": line.get("service_name"),
                    "quantity": line.get("quantite"),
                    "price": line.get("prix_unitaire"),
                }
                for line in df_records(lines)
            ],
        })
    return recent


def analyse(client_id: str | None) -> dict[str, Any]:
    if not client_id:
        raise AIRequestError("L'identifiant du client est obligatoire")
    client = data.client_by_id(client_id)
    if client is None:
        raise AIResourceNotFound("Client introuvable")

    sales = data.client_sales(client_id, limit=50)
    items = data.sale_items_for([str(value) for value in sales["id"]] if not sales.empty else [])
    appointments = data.client_appointments(client_id, limit=30)
    stats = client_statistics(sales, appointments)

    purchased = items["product_name"].dropna().unique().tolist() if not items.empty else []
    categories = items["product_category_id"].dropna().astype(str).unique().tolist() if not items.empty else []

    prompt = f"""Tu es un assistant expert en analyse de profils clients pour salons de beauté et instituts.

Profil client:
- Nom: {client.get("first_name") or ""} {client.get("last_name") or ""}
- Email: {client.get("email") or "N/A"}
- Téléphone: {client.get("phone") or "N/A"}
- Type de peau: {client.get("skin_type") or "Non spécifié"}
- Allergies: {client.get("allergies") or "Aucune"}
- Date de création: {client.get("created_at") or "N/A"}

Historique d'achats:
- Nombre total de visites: {stats["totalVisits"]}
- Montant total dépensé: {stats["totalSpent"]:.0f} FCFA
- Panier moyen: {stats["averageBasket"]:.0f} FCFA
- Nombre de ventes: {len(sales)}

Dernières ventes ({min(5, len(sales))}):
{to_prompt_json(_recent_sales(sales, items))}

Produits achetés: {", ".join(purchased[:20]) or "Aucun"}
Nombre de catégories achetées: {len(categories)}
Rendez-vous récents: {len(appointments)}

Tâches:
1. Dresse le profil comportemental du client
2. Identifie ses préférences (catégories, types de produits, budget)
3. Propose des recommandations personnalisées
4. Anticipe ses besoins futurs
5. Évalue le risque d'attrition et propose des actions de prévention

Réponds au format JSON strict suivant (sans markdown):
{{
  "behavioralProfile": {{"clientType": "VIP|Regular|Occasional|New", "purchasePattern": "...",
    "loyaltyLevel": "High|Medium|Low", "engagementScore": 0}},
  "preferences": {{"favoriteCategories": ["..."], "preferredProductTypes": ["..."], "spendingBehavior": "..."}},
  "personalizedRecommendations": [{{"type": "product|service", "name": "...", "reason": "..."}}],
  "futureNeeds": ["..."],
  "churnRisk": {{"score": 0, "level": "High|Medium|Low", "factors": ["..."], "preventionActions": ["..."]}},
  "insights": ["..."],
  "recommendations": ["..."]
}}"""

    result, parsed = gemini_client.generate_json(prompt, fallback_profile(stats))
    if not parsed:
        logger.info("Profil client %s : repli sur le profil calculé", client_id)
    return {**result, "statistics": stats}
