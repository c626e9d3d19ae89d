"""Alertes proactives : stock faible, baisse des ventes, produits dormants."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Any

import pandas as pd

from institut_core import gemini_client

from . import data
from .common import pct_change, require_admin, signed, to_prompt_json

logger = logging.getLogger(__name__)

LOW_STOCK_THRESHOLD = 10
LOW_STOCK_LIMIT = 20
SALES_DECLINE_THRESHOLD = -20.0


def _total(df: pd.DataFrame, column: str = "total_net") -> float:
    if df.empty or column not in df.columns:
        return 0.0
    return float(pd.to_numeric(df[column], errors="coerce").fillna(0).sum())


def collect_metrics(today: dt.date | None = None) -> dict[str, Any]:
    today = today or dt.date.today()
    last7 = today - dt.timedelta(days=7)
    last14 = today - dt.timedelta(days=14)
    last30 = dt.datetime.combine(today - dt.timedelta(days=30), dt.time())

    low_stock = data.low_stock_products(LOW_STOCK_THRESHOLD, LOW_STOCK_LIMIT)
    recent = data.paid_sales_between(last7, today)
    previous = data.paid_sales_between(last14, last7 - dt.timedelta(days=1))

    recent_total, previous_total = _total(recent), _total(previous)
    products = data.active_products(limit=50)
    sold = data.sold_product_ids_since(last30)
    unsold = products[~products["id"].astype(str).isin(sold)] if not products.empty else products

    return {
        "low_stock": low_stock,
        "unsold": unsold,
        "recent_total": recent_total,
        "previous_total": previous_total,
        "recent_count": len(recent),
        "previous_count": len(previous),
        "sales_change": pct_change(recent_total, previous_total),
        "count_change": pct_change(len(recent), len(previous)),
    }


def _brief(df: pd.DataFrame, limit: int = 10) -> list[dict[str, Any]]:
    if df.empty:
        return []
    return [
        {"name": row["name"], "stock": row.get("stock_quantity"), "price": row.get("price")}
        for _, row in df.head(limit).iterrows()
    ]


def fallback_alerts(metrics: dict[str, Any]) -> dict[str, Any]:
    alerts: list[dict[str, Any]] = []
    low_stock: pd.DataFrame = metrics["low_stock"]
    unsold: pd.DataFrame = metrics["unsold"]
    change = metrics["sales_change"]

    if not low_stock.empty:
        count = len(low_stock)
        alerts.append({
            "type": "low_stock",
            "severity": "High" if count > 5 else "Medium",
            "priority": 1,
            "title": f"Stock faible pour {count} produit(s)",
            "description": f"{count} produit(s) ont un stock inférieur ou égal à {LOW_STOCK_THRESHOLD} unités",
            "affectedItems": list(low_stock["name"].head(5)),
            "preventiveActions": [{
                "action": "Réapprovisionner les produits en stock faible",
                "urgency": "Soon",
                "expectedImpact": "Évite les ruptures de stock",
            }],
            "data": {"currentValue": f"{count} produits", "threshold": f"{LOW_STOCK_THRESHOLD} unités", "trend": "decreasing"},
        })

    if change < SALES_DECLINE_THRESHOLD:
        alerts.append({
            "type": "sales_decline",
            "severity": "High",
            "priority": 2,
            "title": "Baisse significative des ventes",
            "description": f"Les ventes ont baissé de {abs(change):.1f}% par rapport à la période précédente",
            "affectedItems": [],
            "preventiveActions": [{
                "action": "Analyser les causes de la baisse et mettre en place des actions correctives",
                "urgency": "Immediate",
                "expectedImpact": "Stabilise ou améliore les ventes",
            }],
            "data": {"currentValue": f"{change:.1f}%", "threshold": "-20%", "trend": "decreasing"},
        })

    if not unsold.empty:
        count = len(unsold)
        alerts.append({
            "type": "unsold_product",
            "severity": "Medium",
            "priority": 3,
            "title": "Produits sans ventes (30 jours)",
            "description": f"{count} produit(s) n'ont pas été vendus dans les 30 derniers jours",
            "affectedItems": list(unsold["name"].head(5)),
            "preventiveActions": [{
                "action": "Envisager des promotions ou mettre en avant ces produits",
                "urgency": "Soon",
                "expectedImpact": "Augmente les ventes et réduit les stocks dormants",
            }],
            "data": {"currentValue": f"{count} produits", "threshold": "0 ventes", "trend": "stable"},
        })

    return {
        "alerts": alerts,
        "opportunities": [],
        "dailySummary": {
            "criticalAlerts": sum(1 for alert in alerts if alert["severity"] == "High"),
            "importantAlerts": len(alerts),
            "summary": f"{len(alerts)} alerte(s) détectée(s)",
            "recommendedFocus": alerts[0]["title"] if alerts else "Aucune alerte critique",
        },
        "insights": [],
    }


def _prompt(metrics: dict[str, Any]) -> str:
    return f"""Tu es un assistant expert en détection d'alertes proactives pour entreprises de beauté et cosmétiques.

Analyse les données suivantes et détecte les anomalies et opportunités:

Produits en stock faible ({len(metrics["low_stock"])}):
{to_prompt_json(_brief(metrics["low_stock"]))}

Produits sans ventes (30 derniers jours, {len(metrics["unsold"])}):
{to_prompt_json(_brief(metrics["unsold"]))}

Performances des ventes:
- 7 derniers jours: {metrics["recent_total"]:.0f} FCFA ({metrics["recent_count"]} ventes)
- 7 jours précédents: {metrics["previous_total"]:.0f} FCFA ({metrics["previous_count"]} ventes)
- Variation des ventes: {signed(metrics["sales_change"], 1)}%
- Variation du nombre de ventes: {signed(metrics["count_change"], 1)}%

Tâches:
1. Détecte les anomalies (stock faible, ventes en baisse, produits dormants, etc.)
2. Identifie les opportunités (produits populaires, tendances, etc.)
3. Priorise les alertes par importance (High, Medium, Low)
4. Suggère des actions préventives pour chaque alerte
5. Génère un résumé quotidien des alertes importantes

Réponds au format JSON strict suivant (sans markdown):
{{
  "alerts": [{{"type": "low_stock|sales_decline|unsold_product|opportunity|anomaly", "severity": "High|Medium|Low",
    "priority": 1, "title": "...", "description": "...", "affectedItems": [],
    "preventiveActions": [{{"action": "...", "urgency": "Immediate|Soon|Later", "expectedImpact": "..."}}],
    "data": {{"currentValue": "...", "threshold": "...", "trend": "increasing|decreasing|stable"}}}}],
  "opportunities": [{{"type": "promotion|restock|upsell|marketing", "title": "...", "description": "...",
    "potentialImpact": "...", "recommendedAction": "...", "priority": "High|Medium|Low"}}],
  "dailySummary": {{"criticalAlerts": 0, "importantAlerts": 0, "summary": "...", "recommendedFocus": "..."}},
  "insights": ["..."]
}}"""


def smart_alerts(role: str, today: dt.date | None = None) -> dict[str, Any]:
    require_admin(role)
    metrics = collect_metrics(today)
    result, parsed = gemini_client.generate_json(_prompt(metrics), fallback_alerts(metrics))
    if not parsed:
        logger.info("Alertes IA : repli sur les alertes calculées")
    return result
