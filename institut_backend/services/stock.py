"""Réceptions de stock (``dd-stocks``) et lignes associées (``dd-stock-items``)."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

import pandas as pd
from sqlalchemy import text
from sqlalchemy.engine import Connection

from institut_core.code_generators import generate_batch_code, generate_stock_ref
from institut_core.data_repository import get_engine, query_df
from institut_core.repositories.base import PagedResult, SqlTableRepository
from institut_core.repositories.tables import PRODUCTS, STOCK_ITEMS, STOCKS

from . import audit

logger = logging.getLogger(__name__)

LOW_STOCK_THRESHOLD = 10

_stocks = SqlTableRepository(STOCKS)
_items = SqlTableRepository(STOCK_ITEMS)


class StockServiceError(Exception):
    """Base exception for stock operations."""


class StockProductNotFound(StockServiceError):
    """A reception line references an unknown product."""


def list_stocks_page(
    *,
    search: str | None = None,
    status: str | None = None,
    is_active: bool | None = None,
    page: int = 1,
    per_page: int = 20,
) -> PagedResult[dict[str, Any]]:
    return _stocks.list_page(page=page, per_page=per_page, search=search, status=status, is_active=is_active)


def get_stock(stock_id: str) -> dict[str, Any]:
    with get_engine().begin() as conn:
        record = _stocks.fetch_by_id(conn, stock_id)
        record["items"] = _items.find_by(conn, "stock_id", stock_id)
    return record


def _receive_line(conn: Connection, stock: dict[str, Any], line: dict[str, Any], created_by: str | None) -> dict[str, Any]:
    product = conn.execute(
        text(f"SELECT id, sku FROM {PRODUCTS.quoted} WHERE id = :id FOR UPDATE"),
        {"id": line["product_id"]},
    ).fetchone()
    if product is None:
        raise StockProductNotFound(f"Produit {line['product_id']} introuvable.")

    quantity = int(line["quantity"])
    if quantity <= 0:
        raise ValueError("La quantité reçue doit être positive.")
    cost = float(line.get("cost_per_unit") or 0)
    item = _items.insert_with(
        conn,
        {
            "stock_id": stock["id"],
            "product_id": line["product_id"],
            "quantity": quantity,
            "batch_code": generate_batch_code(stock["stock_ref"], product._mapping["sku"]),
            "cost_per_unit": cost,
            "total_cost": round(quantity * cost, 2),
            "expiry_date": line.get("expiry_date"),
            "notes": line.get("notes"),
            "is_active": True,
            "created_by": created_by,
        },
    )
    conn.execute(
        text(
            f"UPDATE {PRODUCTS.quoted} SET stock_quantity = COALESCE(stock_quantity, 0) + :qty WHERE id = :id"
        ),
        {"id": line["product_id"], "qty": quantity},
    )
    return item


def create_stock(
    payload: dict[str, Any],
    items: Iterable[dict[str, Any]] = (),
    *,
    created_by: str | None,
) -> dict[str, Any]:
    values = {key: value for key, value in payload.items() if value is not None}
    values["stock_ref"] = values.get("stock_ref") or generate_stock_ref()
    values["created_by"] = created_by
    with get_engine().begin() as conn:
        stock = _stocks.insert_with(conn, values)
        stock["items"] = [_receive_line(conn, stock, line, created_by) for line in items]
        audit.record_action(
            conn,
            user_id=created_by,
            action_type="stock_reception",
            table=STOCKS.table,
            target_id=stock["id"],
            description=f"Réception {stock['stock_ref']} ({len(stock['items'])} ligne(s))",
        )
    return stock


def add_items(stock_id: str, items: Iterable[dict[str, Any]], *, created_by: str | None) -> list[dict[str, Any]]:
    """Ajoute des lignes à une réception et incrémente le stock produit dans la même transaction."""
    lines = list(items)
    if not lines:
        raise ValueError("Aucune ligne à ajouter.")
    with get_engine().begin() as conn:
        stock = _stocks.fetch_by_id(conn, stock_id)
        received = [_receive_line(conn, stock, line, created_by) for line in lines]
        audit.record_action(
            conn,
            user_id=created_by,
            action_type="stock_reception",
            table=STOCK_ITEMS.table,
            target_id=stock_id,
            description=f"{len(received)} ligne(s) ajoutée(s) à {stock['stock_ref']}",
        )
    return received


def _release_item(conn: Connection, item: dict[str, Any]) -> None:
    conn.execute(
        text(
            f"""
            UPDATE {PRODUCTS.quoted}
            SET stock_quantity = GREATEST(COALESCE(stock_quantity, 0) - :qty, 0)
            WHERE id = :id
            """
        ),
        {"id": item["product_id"], "qty": int(item.get("quantity") or 0)},
    )


def remove_item(item_id: str) -> None:
    with get_engine().begin() as conn:
        item = _items.fetch_by_id(conn, item_id, for_update=True)
        _items.delete_with(conn, item_id)
        _release_item(conn, item)


def update_stock(stock_id: str, changes: dict[str, Any]) -> dict[str, Any]:
    return _stocks.update(stock_id, changes)


def delete_stock(stock_id: str) -> None:
    """Supprime une réception, ses lignes, et retire les quantités reçues du stock produit."""
    with get_engine().begin() as conn:
        _stocks.fetch_by_id(conn, stock_id, for_update=True)
        for item in _items.find_by(conn, "stock_id", stock_id):
            _items.delete_with(conn, item["id"])
            _release_item(conn, item)
        _stocks.delete_with(conn, stock_id)


def fetch_low_stock(threshold: int = LOW_STOCK_THRESHOLD, limit: Optional[int] = None) -> pd.DataFrame:
    sql = f"""
        SELECT id, name, sku, COALESCE(stock_quantity, 0) AS stock_quantity
        FROM {PRODUCTS.quoted}
        WHERE is_active = TRUE AND COALESCE(stock_quantity, 0) <= :threshold
        ORDER BY stock_quantity ASC, name ASC
    """
    params: dict[str, object] = {"threshold": int(threshold)}
    if limit is not None:
        sql += " LIMIT :limit"
        params["limit"] = int(max(1, limit))
    df = query_df(sql, params=params)
    if not df.empty:
        df["id"] = df["id"].astype(str)
        df["stock_quantity"] = df["stock_quantity"].astype(int)
    return df


__all__ = [
    "add_items",
    "create_stock",
    "delete_stock",
    "fetch_low_stock",
    "get_stock",
    "list_stocks_page",
    "remove_item",
    "update_stock",
]
