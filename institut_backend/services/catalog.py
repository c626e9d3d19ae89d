from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from institut_core.code_generators import generate_barcode, generate_sku
from institut_core.data_repository import get_engine
from institut_core.product_utils import decorate_for_website, should_show_on_website
from institut_core.repositories.base import PagedResult, RecordNotFound, SqlTableRepository, row_to_dict
from institut_core.repositories.tables import CATEGORIES, PRODUCTS

logger = logging.getLogger(__name__)

FOREIGN_KEY_VIOLATION = "23503"


class CatalogServiceError(Exception):
    """Base exception for catalogue operations."""


class ProductNotFound(CatalogServiceError):
    """Raised when a product cannot be located."""


_categories = SqlTableRepository(CATEGORIES)
_products = SqlTableRepository(PRODUCTS)


# -- categories ------------------------------------------------------------


def list_categories_page(
    *,
    category_type: str | None = None,
    is_active: bool | None = None,
    search: str | None = None,
    page: int = 1,
    per_page: int = 20,
) -> PagedResult[dict[str, Any]]:
    return _categories.list_page(page=page, per_page=per_page, search=search, type=category_type, is_active=is_active)


def create_category(payload: dict[str, Any], *, created_by: str | None) -> dict[str, Any]:
    return _categories.insert({**payload, "created_by": created_by})


def update_category(category_id: str, changes: dict[str, Any]) -> dict[str, Any]:
    return _categories.update(category_id, changes)


def delete_category(category_id: str) -> None:
    _categories.delete(category_id)


def _category_name(conn, category_id: str | None) -> str | None:
    if not category_id:
        return None
    row = conn.execute(
        text(f"SELECT name FROM {CATEGORIES.quoted} WHERE id = :id"),
        {"id": category_id},
    ).fetchone()
    return str(row[0]) if row else None


# -- products --------------------------------------------------------------


def list_products_page(
    *,
    search: str | None = None,
    category_id: str | None = None,
    status: str | None = None,
    is_active: bool | None = None,
    page: int = 1,
    per_page: int = 20,
) -> PagedResult[dict[str, Any]]:
    return _products.list_page(
        page=page,
        per_page=per_page,
        search=search,
        category_id=category_id,
        status=status,
        is_active=is_active,
    )


def get_product(product_id: str) -> dict[str, Any]:
    try:
        return _products.get(product_id)
    except RecordNotFound as exc:
        raise ProductNotFound(f"Produit {product_id} introuvable.") from exc


def suggest_sku(category_name: str | None, product_name: str) -> str:
    return generate_sku(category_name, product_name)


def create_product(payload: dict[str, Any], *, created_by: str | None) -> dict[str, Any]:
    values = {key: value for key, value in payload.items() if value is not None}
    values["created_by"] = created_by
    with get_engine().begin() as conn:
        if not values.get("sku"):
            values["sku"] = generate_sku(_category_name(conn, values.get("category_id")), values["name"])
        if not values.get("barcode"):
            values["barcode"] = generate_barcode()
        record = _products.insert_with(conn, values)
    logger.info("Produit %s créé (sku=%s)", record.get("id"), record.get("sku"))
    return record


def update_product(product_id: str, changes: dict[str, Any]) -> dict[str, Any]:
    try:
        return _products.update(product_id, changes)
    except RecordNotFound as exc:
        raise ProductNotFound(f"Produit {product_id} introuvable.") from exc


def delete_product(product_id: str) -> bool:
    """Supprime le produit ; archive à la place s'il est encore référencé. Retourne True si archivé."""
    try:
        _products.delete(product_id)
        return False
    except RecordNotFound as exc:
        raise ProductNotFound(f"Produit {product_id} introuvable.") from exc
    except IntegrityError as exc:
        if getattr(exc.orig, "pgcode", None) != FOREIGN_KEY_VIOLATION:
            raise
        logger.info("Produit %s référencé ailleurs : archivage", product_id)
    update_product(product_id, {"is_active": False, "status": "archived"})
    return True


def increase_stock(product_id: str, quantity: int) -> dict[str, Any]:
    if quantity <= 0:
        raise ValueError("La quantité doit être positive.")
    with get_engine().begin() as conn:
        row = conn.execute(
            text(
                f"""
                UPDATE {PRODUCTS.quoted}
                SET stock_quantity = COALESCE(stock_quantity, 0) + :qty
                WHERE id = :id
                RETURNING {PRODUCTS.select_columns}
                """
            ),
            {"id": product_id, "qty": quantity},
        ).fetchone()
    if row is None:
        raise ProductNotFound(f"Produit {product_id} introuvable.")
    return row_to_dict(row)


def list_website_products(*, category_id: str | None = None) -> list[dict[str, Any]]:
    """Produits publiables : actifs, statut ``active``, visibles sur le site et en stock."""
    where = [
        "p.is_active = TRUE",
        "p.status = 'active'",
        "p.show_to_website = TRUE",
        "COALESCE(p.stock_quantity, 0) > 0",
    ]
    params: dict[str, Any] = {}
    if category_id:
        where.append("p.category_id = :category_id")
        params["category_id"] = category_id
    columns = ", ".join(f"p.{col}" for col in ("id",) + PRODUCTS.columns + ("created_at",))
    sql = f"""
        SELECT {columns}, c.id AS category_ref, c.name AS category_name, c.type AS category_type
        FROM {PRODUCTS.quoted} p
        LEFT JOIN {CATEGORIES.quoted} c ON c.id = p.category_id
        WHERE {' AND '.join(where)}
        ORDER BY p.created_at DESC
    """
    with get_engine().begin() as conn:
        rows = conn.execute(text(sql), params).fetchall()

    results: list[dict[str, Any]] = []
    for row in rows:
        record = row_to_dict(row)
        ref = record.pop("category_ref", None)
        name = record.pop("category_name", None)
        kind = record.pop("category_type", None)
        record["category"] = {"id": ref, "name": name, "type": kind} if ref else None
        results.append(decorate_for_website(record))
    return results


def get_website_product(product_id: str) -> dict[str, Any]:
    record = get_product(product_id)
    if not should_show_on_website(record):
        raise ProductNotFound(f"Produit {product_id} non publié.")
    return decorate_for_website(record)
