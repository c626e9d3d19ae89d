"""Lectures SQL alimentant les prompts IA (DataFrames pandas)."""

from __future__ import annotations

import datetime as dt
from typing import Iterable, Sequence

import pandas as pd

from institut_core.data_repository import query_df
from institut_core.repositories.tables import (
    APPOINTMENTS,
    CATEGORIES,
    CLIENTS,
    EXPENSES,
    PRODUCTS,
    SALE_ITEMS,
    SALES,
    SERVICES,
)

PAID = "paye"

_PRODUCT_COLUMNS = (
    "p.id, p.name, p.description, p.brand, p.price, p.cost, p.stock_quantity, p.category_id, "
    "p.images, p.status, p.sku, c.name AS category_name"
)


def paid_sales_between(start: dt.date, end: dt.date) -> pd.DataFrame:
    sql = f"""
        SELECT id, date, total_net, total_brut, reduction, client_id, user_id
        FROM {SALES.quoted}
        WHERE status = :status AND date::date BETWEEN :start AND :end
        ORDER BY date ASC
    """
    return query_df(sql, params={"status": PAID, "start": start, "end": end})


def paid_sales_since(since: dt.datetime, *, client_id: str | None = None) -> pd.DataFrame:
    sql = f"""
        SELECT total_net, date
        FROM {SALES.quoted}
        WHERE status = :status AND date >= :since
    """
    params: dict[str, object] = {"status": PAID, "since": since}
    if client_id:
        sql += " AND client_id = :client_id"
        params["client_id"] = client_id
    return query_df(sql, params=params)


def expenses_between(start: dt.date, end: dt.date) -> pd.DataFrame:
    sql = f"""
        SELECT date, montant
        FROM {EXPENSES.quoted}
        WHERE date::date BETWEEN :start AND :end
        ORDER BY date ASC
    """
    return query_df(sql, params={"start": start, "end": end})


def active_products(*, only_published: bool = True, limit: int | None = None) -> pd.DataFrame:
    sql = f"""
        SELECT {_PRODUCT_COLUMNS}
        FROM {PRODUCTS.quoted} p
        LEFT JOIN {CATEGORIES.quoted} c ON c.id = p.category_id
        WHERE p.is_active = TRUE
    """
    if only_published:
        sql += " AND p.status = 'active'"
    sql += " ORDER BY p.created_at DESC"
    params: dict[str, object] = {}
    if limit is not None:
        sql += " LIMIT :limit"
        params["limit"] = int(limit)
    return query_df(sql, params=params or None)


def low_stock_products(threshold: int = 10, limit: int = 20) -> pd.DataFrame:
    sql = f"""
        SELECT id, name, stock_quantity, price
        FROM {PRODUCTS.quoted}
        WHERE is_active = TRUE AND status = 'active' AND COALESCE(stock_quantity, 0) <= :threshold
        ORDER BY stock_quantity ASC
        LIMIT :limit
    """
    return query_df(sql, params={"threshold": int(threshold), "limit": int(limit)})


def sold_product_ids_since(since: dt.datetime) -> set[str]:
    sql = f"""
        SELECT DISTINCT product_id
        FROM {SALE_ITEMS.quoted}
        WHERE product_id IS NOT NULL AND created_at >= :since
    """
    df = query_df(sql, params={"since": since})
    return {str(value) for value in df["product_id"]} if not df.empty else set()


def active_clients(limit: int = 100) -> pd.DataFrame:
    sql = f"""
        SELECT id, first_name, last_name, total_spent
        FROM {CLIENTS.quoted}
        WHERE is_active = TRUE
        ORDER BY last_name ASC
        LIMIT :limit
    """
    return query_df(sql, params={"limit": int(limit)})


def count_clients_created_since(since: dt.datetime) -> int:
    df = query_df(
        f"SELECT COUNT(*) AS total FROM {CLIENTS.quoted} WHERE created_at >= :since",
        params={"since": since},
    )
    return int(df.iloc[0]["total"] or 0) if not df.empty else 0


def expenses_total_for_day(day: dt.date) -> float:
    df = query_df(
        f"SELECT COALESCE(SUM(montant), 0) AS total FROM {EXPENSES.quoted} WHERE date::date = :day",
        params={"day": day},
    )
    return float(df.iloc[0]["total"] or 0) if not df.empty else 0.0


def appointments_between(start: dt.datetime, end: dt.datetime) -> pd.DataFrame:
    sql = f"""
        SELECT {APPOINTMENTS.select_columns}
        FROM {APPOINTMENTS.quoted}
        WHERE date_rdv BETWEEN :start AND :end
        ORDER BY date_rdv ASC
    """
    return query_df(sql, params={"start": start, "end": end})


def top_products(limit: int = 10) -> pd.DataFrame:
    sql = f"""
        SELECT p.id, p.name, SUM(i.quantite) AS sales
        FROM {SALE_ITEMS.quoted} i
        JOIN {PRODUCTS.quoted} p ON p.id = i.product_id
        WHERE i.product_id IS NOT NULL
        GROUP BY p.id, p.name
        ORDER BY sales DESC
        LIMIT :limit
    """
    return query_df(sql, params={"limit": int(limit)})


def client_by_id(client_id: str) -> dict | None:
    df = query_df(
        f"SELECT {CLIENTS.select_columns} FROM {CLIENTS.quoted} WHERE id = :id",
        params={"id": client_id},
    )
    if df.empty:
        return None
    return df.astype(object).where(pd.notna(df), None).iloc[0].to_dict()


def client_sales(client_id: str, limit: int = 50) -> pd.DataFrame:
    sql = f"""
        SELECT id, date, total_net, status
        FROM {SALES.quoted}
        WHERE client_id = :client_id
        ORDER BY date DESC
        LIMIT :limit
    """
    return query_df(sql, params={"client_id": client_id, "limit": int(limit)})


def sale_items_for(sale_ids: Sequence[str]) -> pd.DataFrame:
    if not sale_ids:
        return pd.DataFrame(columns=["vente_id", "quantite", "prix_unitaire", "product_name", "product_category_id", "service_name"])
    sql = f"""
        SELECT i.vente_id, i.quantite, i.prix_unitaire,
               p.name AS product_name, p.category_id AS product_category_id,
               s.name AS service_name
        FROM {SALE_ITEMS.quoted} i
        LEFT JOIN {PRODUCTS.quoted} p ON p.id = i.product_id
        LEFT JOIN {SERVICES.quoted} s ON s.id = i.service_id
        WHERE i.vente_id = ANY(CAST(:ids AS uuid[]))
    """
    return query_df(sql, params={"ids": [str(sale_id) for sale_id in sale_ids]})


def client_appointments(client_id: str, limit: int = 30) -> pd.DataFrame:
    sql = f"""
        SELECT id, date_rdv, statut, service_id
        FROM {APPOINTMENTS.quoted}
        WHERE client_id = :client_id
        ORDER BY date_rdv DESC
        LIMIT :limit
    """
    return query_df(sql, params={"client_id": client_id, "limit": int(limit)})


def product_category_names() -> list[str]:
    df = query_df(
        f"SELECT name FROM {CATEGORIES.quoted} WHERE type = 'product' AND is_active = TRUE ORDER BY name ASC"
    )
    return [str(name) for name in df["name"]] if not df.empty else []


def category_name(category_id: str | None) -> str | None:
    if not category_id:
        return None
    df = query_df(f"SELECT name FROM {CATEGORIES.quoted} WHERE id = :id", params={"id": category_id})
    return str(df.iloc[0]["name"]) if not df.empty else None


def products_matching(keywords: Iterable[str], limit: int = 3) -> pd.DataFrame:
    """Produits publiés dont le nom contient l'un des mots-clés (insensible à la casse)."""
    keywords = list(keywords)
    if not keywords:
        return active_products(limit=limit)
    clauses = " OR ".join(f"p.name ILIKE :kw{index}" for index in range(len(keywords)))
    params: dict[str, object] = {f"kw{index}": f"%{word}%" for index, word in enumerate(keywords)}
    params["limit"] = int(limit)
    sql = f"""
        SELECT {_PRODUCT_COLUMNS}
        FROM {PRODUCTS.quoted} p
        LEFT JOIN {CATEGORIES.quoted} c ON c.id = p.category_id
        WHERE p.is_active = TRUE AND p.status = 'active' AND ({clauses})
        LIMIT :limit
    """
    return query_df(sql, params=params)
