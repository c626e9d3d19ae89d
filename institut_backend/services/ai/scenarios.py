"""Simulations « what-if » et aide à la décision stratégique."""

from __future__ import annotations

import datetime as dt
from typing import Any

import pandas as pd

from institut_core import gemini_client

from . import data
from .common import AIRequestError, require_admin, to_prompt_json
from .performance import period_metrics

BASELINE_DAYS = 30
LOW_STOCK_THRESHOLD = 10


def baseline(today: dt.date | None = None) -> dict[str, float]:
    """Indicateurs des 30 derniers jours servant de référence aux simulations."""
    today = today or dt.date.today()
    start = today - dt.timedelta(days=BASELINE_DAYS)
    sales = data.paid_sales_between(start, today)
    metrics = period_metrics(sales, data.expenses_between(start, today))
    discount = 0.0
    if not sales.empty and "reduction" in sales.columns:
        discount = float(pd.to_numeric(sales["reduction"], errors="coerce").fillna(0).sum())
    return {
        "totalSales": metrics["totalSales"],
        "totalExpenses": metrics["totalExpenses"],
        "profit": metrics["profit"],
        "salesCount": metrics["salesCount"],
        "averageBasket": metrics["averageBasket"],
        "discount": discount,
    }


def _projection(
    base: dict[str, float],
    sales_factor: float,
    profit_factor: float,
    expenses_factor: float,
    count_factor: float,
    basket_factor: float,
    sales_pct: float,
    profit_pct: float,
) -> dict[str, Any]:
    # Le scénario réaliste suppose +10 % de ventes et +15 % de profit.
    projected_sales = base["totalSales"] * 1.1 * sales_factor
    projected_profit = base["profit"] * 1.15 * profit_factor
    return {
        "projectedSales": round(projected_sales),
        "projectedExpenses": round(base["totalExpenses"] * expenses_factor),
        "projectedProfit": round(projected_profit),
        "projectedSalesCount": round(base["salesCount"] * count_factor),
        "projectedAverageBasket": round(base["averageBasket"] * basket_factor),
        "changes": {
            "salesChange": round(projected_sales - base["totalSales"]),
            "salesPercentChange": sales_pct,
            "profitChange": round(projected_profit - base["profit"]),
            "profitPercentChange": profit_pct,
        },
    }


def fallback_simulation(scenario: str, parameters: dict[str, Any], base: dict[str, float]) -> dict[str, Any]:
    return {
        "scenario": {"name": scenario, "description": "Simulation du scénario", "parameters": parameters},
        "simulations": {
            "realistic": _projection(base, 1.0, 1.0, 1.0, 1.05, 1.0, 10.0, 15.0),
            "optimistic": _projection(base, 1.2, 1.3, 1.0, 1.15, 1.05, 20.0, 30.0),
            "pessimistic": _projection(base, 0.85, 0.75, 1.05, 0.9, 0.95, -5.0, -10.0),
        },
        "baseline": {key: base[key] for key in ("totalSales", "totalExpenses", "profit", "salesCount", "averageBasket")},
        "impacts": {},
        "risks": [],
        "opportunities": [],
        "successProbability": 70,
        "recommendations": [],
        "kpis": [],
        "timeline": {},
        "insights": [],
    }


def simulate(scenario: str, parameters: dict[str, Any] | None, role: str, today: dt.date | None = None) -> dict[str, Any]:
    require_admin(role)
    if not scenario or not scenario.strip():
        raise AIRequestError("La description du scénario est obligatoire")
    parameters = parameters or {}
    base = baseline(today)
    product_count = len(data.active_products(limit=50))

    prompt = f"""Tu es un assistant expert en simulation de scénarios business pour entreprises de beauté et cosmétiques.

Scénario "What-If" à simuler:
"{scenario}"

Paramètres fournis:
{to_prompt_json(parameters)}

Situation actuelle (baseline - {BASELINE_DAYS} derniers jours):
- Ventes totales: {base["totalSales"]:.0f} FCFA
- Dépenses totales: {base["totalExpenses"]:.0f} FCFA
- Profit: {base["profit"]:.0f} FCFA
- Nombre de ventes: {base["salesCount"]}
- Panier moyen: {base["averageBasket"]:.0f} FCFA
- Réductions totales: {base["discount"]:.0f} FCFA
- Nombre de produits actifs: {product_count}

Tâches:
1. Simule le scénario décrit avec les paramètres fournis
2. Calcule les impacts prévus sur les métriques clés (ventes, profit, clients, etc.)
3. Compare avec la situation actuelle (baseline)
4. Identifie les risques et opportunités
5. Estime la probabilité de succès
6. Propose des variations du scénario (optimiste, réaliste, pessimiste)
7. Recommande des indicateurs de suivi (KPIs)

Réponds au format JSON strict suivant (sans markdown):
{{
  "scenario": {{"name": "...", "description": "...", "parameters": {{}}}},
  "simulations": {{"realistic": {{"projectedSales": 0, "projectedExpenses": 0, "projectedProfit": 0,
    "projectedSalesCount": 0, "projectedAverageBasket": 0, "changes": {{"salesChange": 0,
    "salesPercentChange": 0, "profitChange": 0, "profitPercentChange": 0}}}}, "optimistic": {{}}, "pessimistic": {{}}}},
  "baseline": {{}},
  "impacts": {{}},
  "risks": [{{"risk": "...", "probability": "High|Medium|Low", "impact": "...", "mitigation": "..."}}],
  "opportunities": ["..."],
  "successProbability": 70,
  "recommendations": ["..."],
  "kpis": [{{"kpi": "...", "target": "...", "frequency": "..."}}],
  "timeline": {{"implementation": "...", "expectedResults": "...", "reviewPoints": ["..."]}},
  "insights": ["..."]
}}"""

    result, _ = gemini_client.generate_json(prompt, fallback_simulation(scenario, parameters, base))
    return result


def decision_metrics(today: dt.date | None = None) -> dict[str, float]:
    today = today or dt.date.today()
    base = baseline(today)
    since = dt.datetime.combine(today - dt.timedelta(days=BASELINE_DAYS), dt.time())
    products = data.active_products(only_published=False, limit=50)
    low_stock = 0
    if not products.empty:
        low_stock = int((pd.to_numeric(products["stock_quantity"], errors="coerce").fillna(0) <= LOW_STOCK_THRESHOLD).sum())
    return {
        **base,
        "profitMargin": base["profit"] / base["totalSales"] * 100 if base["totalSales"] > 0 else 0.0,
        "newClients": data.count_clients_created_since(since),
        "lowStockCount": low_stock,
    }


def fallback_decision(question: str) -> dict[str, Any]:
    return {
        "analysis": {"question": question, "context": "Analyse du contexte de la question", "keyFactors": []},
        "scenarios": [],
        "risks": [],
        "opportunities": [],
        "recommendations": [],
        "actionPlan": {"steps": [], "timeline": "À définir", "resourcesNeeded": []},
        "dataConsiderations": [],
        "insights": [],
    }


def advise(question: str, context: str | None, role: str, today: dt.date | None = None) -> dict[str, Any]:
    require_admin(role)
    if not question or not question.strip():
        raise AIRequestError("La question est obligatoire")
    metrics = decision_metrics(today)

    prompt = f"""Tu es un assistant expert en aide à la décision stratégique pour entreprises de beauté et cosmétiques.

Question stratégique de l'utilisateur:
"{question}"

Contexte fourni:
{context or 'Aucun contexte supplémentaire'}

Données actuelles de l'entreprise ({BASELINE_DAYS} derniers jours):
- Ventes totales: {metrics["totalSales"]:.0f} FCFA
- Dépenses totales: {metrics["totalExpenses"]:.0f} FCFA
- Profit: {metrics["profit"]:.0f} FCFA
- Marge bénéficiaire: {metrics["profitMargin"]:.1f}%
- Nombre de ventes: {metrics["salesCount"]}
- Panier moyen: {metrics["averageBasket"]:.0f} FCFA
- Nouveaux clients: {metrics["newClients"]}
- Produits en stock faible: {metrics["lowStockCount"]}

Tâches:
1. Analyse la question et ses enjeux
2. Propose plusieurs scénarios avec leurs avantages et inconvénients
3. Identifie les risques et opportunités
4. Formule des recommandations argumentées et chiffrées
5. Propose un plan d'action concret

Réponds au format JSON strict suivant (sans markdown):
{{
  "analysis": {{"question": "...", "context": "...", "keyFactors": ["..."]}},
  "scenarios": [{{"name": "...", "description": "...", "pros": ["..."], "cons": ["..."], "expectedOutcome": "..."}}],
  "risks": [{{"risk": "...", "probability": "High|Medium|Low", "impact": "...", "mitigation": "..."}}],
  "opportunities": ["..."],
  "recommendations": [{{"recommendation": "...", "rationale": "...", "priority": "High|Medium|Low"}}],
  "actionPlan": {{"steps": ["..."], "timeline": "...", "resourcesNeeded": ["..."]}},
  "dataConsiderations": ["..."],
  "insights": ["..."]
}}"""

    result, _ = gemini_client.generate_json(prompt, fallback_decision(question))
    return result
