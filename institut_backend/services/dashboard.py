"""Dashboard aggregation services."""

from __future__ import annotations

from typing import Any, List

from institut_core.data_repository import query_df
from institut_core.product_utils import LOW_STOCK_THRESHOLD
from institut_core.repositories.tables import (
    APPOINTMENTS,
    CLIENTS,
    EXPENSES,
    PRODUCTS,
    REVENUES,
    SALE_ITEMS,
    SALES,
    SERVICES,
    USERS,
)


def fetch_kpis(*, days: int = 30) -> dict[str, float | int]:
    sql = f"""
        SELECT
            (SELECT COUNT(*) FROM {USERS.quoted} WHERE is_active = TRUE) AS utilisateurs_actifs,
            (SELECT COUNT(*) FROM {CLIENTS.quoted} WHERE is_active = TRUE) AS clients_actifs,
            (SELECT COUNT(*) FROM {PRODUCTS.quoted} WHERE is_active = TRUE) AS produits_actifs,
            (SELECT COUNT(*) FROM {SERVICES.quoted} WHERE is_active = TRUE) AS prestations_actives,
            (SELECT COALESCE(SUM(total_net), 0) FROM {SALES.quoted}
                WHERE status = 'paye' AND date >= now() - make_interval(days => :days)) AS ventes_total,
            (SELECT COUNT(*) FROM {SALES.quoted}
                WHERE status = 'paye' AND date >= now() - make_interval(days => :days)) AS ventes_nombre,
            (SELECT COALESCE(SUM(montant), 0) FROM {REVENUES.quoted}
                WHERE date >= now() - make_interval(days => :days)) AS revenus_total,
            (SELECT COALESCE(SUM(montant), 0) FROM {EXPENSES.quoted}
                WHERE date >= now() - make_interval(days => :days)) AS depenses_total,
            (SELECT COUNT(*) FROM {APPOINTMENTS.quoted}
                WHERE date_rdv >= now() - make_interval(days => :days)) AS rendez_vous,
            (SELECT COUNT(*) FROM {PRODUCTS.quoted}
                WHERE is_active = TRUE AND COALESCE(stock_quantity, 0) <= :low) AS stock_bas
    """
    df = query_df(sql, params={"days": int(days), "low": LOW_STOCK_THRESHOLD})
    keys = (
        "utilisateurs_actifs", "clients_actifs", "produits_actifs", "prestations_actives", "ventes_total",
        "ventes_nombre", "revenus_total", "depenses_total", "rendez_vous", "stock_bas",
    )
    if df.empty:
        return {key: 0 for key in keys}
    row = df.iloc[0]
    return {
        key: float(row.get(key, 0) or 0) if key.endswith("_total") else int(row.get(key, 0) or 0)
        for key in keys
    }


def _fetch_top(column: str, table: str, *, days: int, limit: int) -> List[dict[str, Any]]:
    sql = f"""
        SELECT t.name AS nom,
               COALESCE(SUM(i.quantite), 0) AS quantite_vendue,
               COALESCE(SUM(i.quantite * i.prix_unitaire), 0) AS chiffre_affaires
        FROM {SALE_ITEMS.quoted} i
        JOIN {SALES.quoted} v ON v.id = i.vente_id
        JOIN {table} t ON t.id = i.{column}
        WHERE v.status = 'paye'
          AND v.date >= now() - make_interval(days => :days)
        GROUP BY t.name
        ORDER BY quantite_vendue DESC
        LIMIT :limit
    """
    df = query_df(sql, params={"days": int(days), "limit": int(limit)})
    return df.to_dict(orient="records") if not df.empty else []


def fetch_top_products(*, days: int = 30, limit: int = 5) -> List[dict[str, Any]]:
    return _fetch_top("product_id", PRODUCTS.quoted, days=days, limit=limit)


def fetch_top_services(*, days: int = 30, limit: int = 5) -> List[dict[str, Any]]:
    return _fetch_top("service_id", SERVICES.quoted, days=days, limit=limit)


def build_summary(*, days: int = 30) -> dict[str, Any]:
    return {
        "days": days,
        "kpis": fetch_kpis(days=days),
        "top_products": fetch_top_products(days=days),
        "top_services": fetch_top_services(days=days),
    }
