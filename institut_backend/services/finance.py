"""Finance service: dépenses, revenus et synthèse de période."""

from __future__ import annotations

import datetime as dt
from typing import Any

from institut_core.data_repository import query_df
from institut_core.repositories.base import PagedResult, SqlTableRepository
from institut_core.repositories.tables import EXPENSES, REVENUES, SALES

_expenses = SqlTableRepository(EXPENSES)
_revenues = SqlTableRepository(REVENUES)


def list_expenses_page(
    *,
    categorie: str | None = None,
    date_from: dt.date | None = None,
    date_to: dt.date | None = None,
    search: str | None = None,
    page: int = 1,
    per_page: int = 20,
) -> PagedResult[dict[str, Any]]:
    return _expenses.list_page(
        page=page, per_page=per_page, search=search, date_from=date_from, date_to=date_to, categorie=categorie
    )


def create_expense(payload: dict[str, Any], *, recorded_by: str | None) -> dict[str, Any]:
    return _expenses.insert({**payload, "enregistre_par": recorded_by})


def update_expense(expense_id: str, changes: dict[str, Any]) -> dict[str, Any]:
    return _expenses.update(expense_id, changes)


def delete_expense(expense_id: str) -> None:
    _expenses.delete(expense_id)


def list_revenues_page(
    *,
    revenue_type: str | None = None,
    date_from: dt.date | None = None,
    date_to: dt.date | None = None,
    search: str | None = None,
    page: int = 1,
    per_page: int = 20,
) -> PagedResult[dict[str, Any]]:
    return _revenues.list_page(
        page=page, per_page=per_page, search=search, date_from=date_from, date_to=date_to, type=revenue_type
    )


def create_revenue(payload: dict[str, Any], *, recorded_by: str | None) -> dict[str, Any]:
    return _revenues.insert({**payload, "enregistre_par": recorded_by})


def update_revenue(revenue_id: str, changes: dict[str, Any]) -> dict[str, Any]:
    return _revenues.update(revenue_id, changes)


def delete_revenue(revenue_id: str) -> None:
    _revenues.delete(revenue_id)


def compute_summary(start: dt.date | None = None, end: dt.date | None = None) -> dict[str, Any]:
    """Ventes payées, revenus, dépenses et bénéfice sur [start, end] (30 derniers jours par défaut)."""

    end = end or dt.date.today()
    start = start or (end - dt.timedelta(days=30))
    if start > end:
        raise ValueError("La date de début doit précéder la date de fin.")
    params = {"start": start, "end": end}

    sales = query_df(
        f"""
        SELECT COALESCE(SUM(total_net), 0) AS total, COUNT(*) AS nombre
        FROM {SALES.quoted}
        WHERE status = 'paye' AND date::date BETWEEN :start AND :end
        """,
        params=params,
    )
    revenues = query_df(
        f"SELECT COALESCE(SUM(montant), 0) AS total FROM {REVENUES.quoted} WHERE date::date BETWEEN :start AND :end",
        params=params,
    )
    expenses = query_df(
        f"""
        SELECT COALESCE(NULLIF(TRIM(categorie), ''), 'Autre') AS categorie, SUM(montant) AS total
        FROM {EXPENSES.quoted}
        WHERE date::date BETWEEN :start AND :end
        GROUP BY 1
        ORDER BY total DESC
        """,
        params=params,
    )

    sales_total = float(sales.iloc[0]["total"] or 0) if not sales.empty else 0.0
    sales_count = int(sales.iloc[0]["nombre"] or 0) if not sales.empty else 0
    revenues_total = float(revenues.iloc[0]["total"] or 0) if not revenues.empty else 0.0
    by_category: dict[str, float] = {}
    if not expenses.empty:
        by_category = {str(row["categorie"]): round(float(row["total"] or 0), 2) for _, row in expenses.iterrows()}
    expenses_total = round(sum(by_category.values()), 2)

    return {
        "start": start,
        "end": end,
        "sales_total": round(sales_total, 2),
        "sales_count": sales_count,
        "revenues_total": round(revenues_total, 2),
        "expenses_total": expenses_total,
        "profit": round(sales_total + revenues_total - expenses_total, 2),
        "expenses_by_category": by_category,
    }
