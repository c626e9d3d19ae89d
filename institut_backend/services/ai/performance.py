"""Prédiction et comparaison de performance commerciale."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Any

import numpy as np
import pandas as pd

from institut_core import gemini_client

from . import data
from .common import pct_change, require_admin, signed, to_prompt_json

logger = logging.getLogger(__name__)

HISTORY_MONTHS = 6
AVERAGE_WINDOW = 3
DEFAULT_PERIOD = "mensuel"


def _months_ago(day: dt.date, months: int) -> dt.date:
    stamp = pd.Timestamp(day) - pd.DateOffset(months=months)
    return stamp.date()


def monthly_aggregates(sales: pd.DataFrame, expenses: pd.DataFrame) -> pd.DataFrame:
    """Ventes, dépenses, profit et nombre de ventes par mois (``YYYY-MM``), triés."""
    columns = ["month", "sales", "expenses", "profit", "count"]
    frames = []
    if not sales.empty:
        s = pd.DataFrame({
            "month": pd.to_datetime(sales["date"]).dt.strftime("%Y-%m"),
            "sales": pd.to_numeric(sales["total_net"], errors="coerce").fillna(0),
        })
        frames.append(s.groupby("month").agg(sales=("sales", "sum"), count=("sales", "size")))
    if not expenses.empty:
        e = pd.DataFrame({
            "month": pd.to_datetime(expenses["date"]).dt.strftime("%Y-%m"),
            "expenses": pd.to_numeric(expenses["montant"], errors="coerce").fillna(0),
        })
        frames.append(e.groupby("month").agg(expenses=("expenses", "sum")))
    if not frames:
        return pd.DataFrame(columns=columns)

    monthly = pd.concat(frames, axis=1).fillna(0)
    for column in ("sales", "expenses", "count"):
        if column not in monthly.columns:
            monthly[column] = 0
    monthly["profit"] = monthly["sales"] - monthly["expenses"]
    monthly["count"] = monthly["count"].astype(int)
    return monthly.reset_index().rename(columns={"index": "month"}).sort_values("month")[columns]


def recent_averages(monthly: pd.DataFrame, window: int = AVERAGE_WINDOW) -> dict[str, float]:
    tail = monthly.tail(window)
    if tail.empty:
        return {"sales": 0.0, "profit": 0.0, "count": 0.0}
    return {
        "sales": float(np.mean(tail["sales"])),
        "profit": float(np.mean(tail["profit"])),
        "count": float(np.mean(tail["count"])),
    }


def fallback_prediction(period: str, averages: dict[str, float]) -> dict[str, Any]:
    sales, profit, count = averages["sales"], averages["profit"], averages["count"]
    return {
        "predictions": {
            period: {
                "realistic": {"sales": round(sales), "profit": round(profit), "count": round(count)},
                "optimistic": {"sales": round(sales * 1.2), "profit": round(profit * 1.2), "count": round(count * 1.15)},
                "pessimistic": {"sales": round(sales * 0.8), "profit": round(profit * 0.8), "count": round(count * 0.85)},
            }
        },
        "trends": {
            "direction": "stable",
            "strength": "moderate",
            "description": "Tendance stable basée sur les moyennes récentes",
        },
        "seasonalPatterns": [],
        "confidenceLevel": 70,
        "riskFactors": [],
        "opportunities": [],
        "strategicRecommendations": [],
        "insights": [],
    }


def predict(period: str | None, role: str, today: dt.date | None = None) -> dict[str, Any]:
    require_admin(role)
    period = period or DEFAULT_PERIOD
    today = today or dt.date.today()
    start = _months_ago(today, HISTORY_MONTHS)

    monthly = monthly_aggregates(data.paid_sales_between(start, today), data.expenses_between(start, today))
    averages = recent_averages(monthly)
    history = monthly.to_dict(orient="records")

    prompt = f"""Tu es un assistant expert en prédictions de performance pour entreprises de beauté et cosmétiques.

Données historiques ({HISTORY_MONTHS} derniers mois):
{to_prompt_json(history)}

Moyennes des {AVERAGE_WINDOW} derniers mois:
- Ventes moyennes: {averages["sales"]:.0f} FCFA
- Profit moyen: {averages["profit"]:.0f} FCFA
- Nombre moyen de ventes: {averages["count"]:.0f}

Période de prédiction demandée: {period}

Tâches:
1. Analyse les tendances historiques (croissance, stagnation, déclin)
2. Détecte les tendances saisonnières si présentes
3. Prédit les performances pour la période suivante ({period})
4. Calcule des intervalles de confiance (scénario optimiste, réaliste, pessimiste)
5. Identifie les facteurs de risque et opportunités
6. Recommande des stratégies proactives pour améliorer les performances

Réponds au format JSON strict suivant (sans markdown):
{{
  "predictions": {{"{period}": {{"realistic": {{"sales": 0, "profit": 0, "count": 0}},
    "optimistic": {{"sales": 0, "profit": 0, "count": 0}}, "pessimistic": {{"sales": 0, "profit": 0, "count": 0}}}}}},
  "trends": {{"direction": "growing|stable|declining", "strength": "strong|moderate|weak", "description": "..."}},
  "seasonalPatterns": [{{"period": "...", "expectedImpact": "..."}}],
  "confidenceLevel": 85,
  "riskFactors": [{{"factor": "...", "impact": "High|Medium|Low", "mitigation": "..."}}],
  "opportunities": [{{"opportunity": "...", "potentialImpact": "...", "recommendedAction": "..."}}],
  "strategicRecommendations": ["..."],
  "insights": ["..."]
}}"""

    result, _ = gemini_client.generate_json(prompt, fallback_prediction(period, averages))
    return {**result, "historicalData": history, "currentAverages": averages}


# -- comparaison -------------------------------------------------------------


def period_metrics(sales: pd.DataFrame, expenses: pd.DataFrame) -> dict[str, float]:
    total_sales = float(pd.to_numeric(sales.get("total_net", pd.Series(dtype=float)), errors="coerce").fillna(0).sum())
    total_expenses = float(pd.to_numeric(expenses.get("montant", pd.Series(dtype=float)), errors="coerce").fillna(0).sum())
    count = int(len(sales))
    return {
        "totalSales": total_sales,
        "totalExpenses": total_expenses,
        "salesCount": count,
        "averageBasket": total_sales / count if count else 0.0,
        "profit": total_sales - total_expenses,
    }


def metric_changes(current: dict[str, float], previous: dict[str, float]) -> dict[str, float]:
    return {
        "sales": current["totalSales"] - previous["totalSales"],
        "salesPercent": pct_change(current["totalSales"], previous["totalSales"]),
        "profit": current["profit"] - previous["profit"],
        "profitPercent": pct_change(current["profit"], previous["profit"]),
        "count": current["salesCount"] - previous["salesCount"],
        "countPercent": pct_change(current["salesCount"], previous["salesCount"]),
        "averageBasket": current["averageBasket"] - previous["averageBasket"],
        "averageBasketPercent": pct_change(current["averageBasket"], previous["averageBasket"]),
    }


def overall_trend(profit_change: float) -> str:
    if profit_change > 0:
        return "improving"
    if profit_change < 0:
        return "declining"
    return "stable"


def _bounds(period: dict[str, Any] | None, default_start: dt.date, default_end: dt.date) -> tuple[dt.date, dt.date]:
    period = period or {}
    start = period.get("start") or default_start
    end = period.get("end") or default_end
    if isinstance(start, str):
        start = dt.date.fromisoformat(start[:10])
    if isinstance(end, str):
        end = dt.date.fromisoformat(end[:10])
    return start, end


def _describe(label: str, start: dt.date, end: dt.date, metrics: dict[str, float]) -> str:
    return (
        f"{label} ({start} à {end}):\n"
        f"- Ventes totales: {metrics['totalSales']:.0f} FCFA\n"
        f"- Dépenses totales: {metrics['totalExpenses']:.0f} FCFA\n"
        f"- Profit: {metrics['profit']:.0f} FCFA\n"
        f"- Nombre de ventes: {metrics['salesCount']}\n"
        f"- Panier moyen: {metrics['averageBasket']:.0f} FCFA"
    )


def compare(
    comparison_type: str | None,
    period1: dict[str, Any] | None,
    period2: dict[str, Any] | None,
    role: str,
    today: dt.date | None = None,
) -> dict[str, Any]:
    """Compare deux périodes ; par défaut les 30 derniers jours aux 30 précédents."""
    require_admin(role)
    today = today or dt.date.today()
    start1, end1 = _bounds(period1, today - dt.timedelta(days=30), today)
    start2, end2 = _bounds(period2, today - dt.timedelta(days=60), today - dt.timedelta(days=30))
    if start1 > end1 or start2 > end2:
        raise ValueError("Chaque période doit commencer avant de finir.")

    metrics1 = period_metrics(data.paid_sales_between(start1, end1), data.expenses_between(start1, end1))
    metrics2 = period_metrics(data.paid_sales_between(start2, end2), data.expenses_between(start2, end2))
    changes = metric_changes(metrics1, metrics2)

    prompt = f"""Tu es un assistant expert en analyse comparative de performance pour entreprises de beauté et cosmétiques.
Type de comparaison: {comparison_type or 'périodes'}

{_describe("Période 1", start1, end1, metrics1)}

{_describe("Période 2", start2, end2, metrics2)}

Changements:
- Ventes: {signed(changes["sales"])} FCFA ({signed(changes["salesPercent"], 1)}%)
- Profit: {signed(changes["profit"])} FCFA ({signed(changes["profitPercent"], 1)}%)
- Nombre de ventes: {signed(changes["count"])} ({signed(changes["countPercent"], 1)}%)
- Panier moyen: {signed(changes["averageBasket"])} FCFA ({signed(changes["averageBasketPercent"], 1)}%)

Tâches:
1. Compare les performances entre les deux périodes
2. Identifie les facteurs explicatifs des différences
3. Analyse les causes probables des variations
4. Identifie les points forts et points faibles
5. Propose des suggestions d'amélioration

Réponds au format JSON strict suivant (sans markdown):
{{
  "comparison": {{"overallTrend": "improving|stable|declining", "keyChanges": [{{"metric": "...", "change": "...", "significance": "High|Medium|Low"}}]}},
  "factors": [{{"factor": "...", "impact": "positive|negative", "description": "..."}}],
  "causes": ["..."],
  "benchmarking": {{"performance": "above|at|below", "description": "..."}},
  "strengths": ["..."],
  "weaknesses": ["..."],
  "improvementSuggestions": [{{"suggestion": "...", "priority": "High|Medium|Low", "expectedImpact": "..."}}],
  "insights": ["..."]
}}"""

    fallback = {
        "comparison": {"overallTrend": overall_trend(changes["profit"]), "keyChanges": []},
        "factors": [],
        "causes": [],
        "benchmarking": {},
        "strengths": [],
        "weaknesses": [],
        "improvementSuggestions": [],
        "insights": [],
    }
    result, _ = gemini_client.generate_json(prompt, fallback)
    return {
        **result,
        "metrics": {"period1": metrics1, "period2": metrics2, "changes": changes},
        "periods": {
            "period1": {"start": start1.isoformat(), "end": end1.isoformat()},
            "period2": {"start": start2.isoformat(), "end": end2.isoformat()},
        },
    }
