"""Ventes (``dd-ventes``) et leurs lignes (``dd-ventes-items``)."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Iterable

from sqlalchemy import text
from sqlalchemy.engine import Connection

from institut_core.data_repository import get_engine
from institut_core.repositories.base import PagedResult, RecordNotFound, SqlTableRepository
from institut_core.repositories.tables import CLIENTS, PRODUCTS, SALE_ITEMS, SALES

logger = logging.getLogger(__name__)

PAID_STATUS = "paye"
# Statuts pour lesquels les produits vendus sont revenus en stock.
REVERSED_STATUSES = frozenset({"annule", "rembourse"})

_sales = SqlTableRepository(SALES)
_items = SqlTableRepository(SALE_ITEMS)


class SaleServiceError(Exception):
    """Base exception for sale operations."""


class SaleNotFound(SaleServiceError):
    pass


class InsufficientStock(SaleServiceError):
    """Raised when a product line exceeds the available quantity."""


def compute_totals(lines: Iterable[dict[str, Any]], reduction: float = 0) -> tuple[float, float]:
    """Retourne (total_brut, total_net) ; le net n'est jamais négatif."""
    brut = sum(float(line.get("quantite") or 0) * float(line.get("prix_unitaire") or 0) for line in lines)
    brut = round(brut, 2)
    net = max(0.0, round(brut - float(reduction or 0), 2))
    return brut, net


def derive_sale_type(lines: Iterable[dict[str, Any]]) -> str:
    has_product = has_service = False
    for line in lines:
        if line.get("product_id"):
            has_product = True
        if line.get("service_id"):
            has_service = True
    if has_product and has_service:
        return "mixte"
    return "service" if has_service else "produit"


def list_sales_page(
    *,
    search: str | None = None,
    status: str | None = None,
    sale_type: str | None = None,
    client_id: str | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    page: int = 1,
    per_page: int = 20,
) -> PagedResult[dict[str, Any]]:
    return _sales.list_page(
        page=page,
        per_page=per_page,
        search=search,
        date_from=date_from,
        date_to=date_to,
        status=status,
        type=sale_type,
        client_id=client_id,
    )


def get_sale(sale_id: str) -> dict[str, Any]:
    with get_engine().begin() as conn:
        try:
            record = _sales.fetch_by_id(conn, sale_id)
        except RecordNotFound as exc:
            raise SaleNotFound(f"Vente {sale_id} introuvable.") from exc
        record["items"] = _items.find_by(conn, "vente_id", sale_id)
    return record


def _decrement_product(conn: Connection, product_id: str, quantity: int) -> None:
    row = conn.execute(
        text(f"SELECT name, COALESCE(stock_quantity, 0) AS stock_quantity FROM {PRODUCTS.quoted} WHERE id = :id FOR UPDATE"),
        {"id": product_id},
    ).fetchone()
    if row is None:
        raise SaleServiceError(f"Produit {product_id} introuvable.")
    available = int(row._mapping["stock_quantity"])
    if available < quantity:
        raise InsufficientStock(
            f"Stock insuffisant pour {row._mapping['name']} : {available} disponible(s), {quantity} demandé(s)."
        )
    conn.execute(
        text(f"UPDATE {PRODUCTS.quoted} SET stock_quantity = stock_quantity - :qty WHERE id = :id"),
        {"id": product_id, "qty": quantity},
    )


def _credit_client(conn: Connection, client_id: str | None, amount: float) -> None:
    if not client_id or amount <= 0:
        return
    conn.execute(
        text(f"UPDATE {CLIENTS.quoted} SET total_spent = COALESCE(total_spent, 0) + :amount WHERE id = :id"),
        {"id": client_id, "amount": amount},
    )


def _debit_client(conn: Connection, client_id: str | None, amount: float) -> None:
    if not client_id or amount <= 0:
        return
    conn.execute(
        text(
            f"UPDATE {CLIENTS.quoted} SET total_spent = GREATEST(COALESCE(total_spent, 0) - :amount, 0) "
            "WHERE id = :id"
        ),
        {"id": client_id, "amount": amount},
    )


def _restock_lines(conn: Connection, sale_id: str) -> None:
    for line in _items.find_by(conn, "vente_id", sale_id):
        if not line.get("product_id"):
            continue
        conn.execute(
            text(f"UPDATE {PRODUCTS.quoted} SET stock_quantity = COALESCE(stock_quantity, 0) + :qty WHERE id = :id"),
            {"id": line["product_id"], "qty": int(line.get("quantite") or 0)},
        )


def create_sale(payload: dict[str, Any], items: list[dict[str, Any]], *, user_id: str | None) -> dict[str, Any]:
    if not items:
        raise ValueError("Une vente doit contenir au moins une ligne.")
    brut, net = compute_totals(items, payload.get("reduction") or 0)
    status = payload.get("status") or PAID_STATUS
    values = {
        "client_id": payload.get("client_id"),
        "user_id": user_id,
        "date": payload.get("date") or datetime.now(timezone.utc),
        "type": derive_sale_type(items),
        "total_brut": brut,
        "reduction": float(payload.get("reduction") or 0),
        "total_net": net,
        "methode_paiement": payload.get("methode_paiement") or "especes",
        "status": status,
    }
    with get_engine().begin() as conn:
        sale = _sales.insert_with(conn, values)
        sale["items"] = []
        for line in items:
            if line.get("product_id") and status not in REVERSED_STATUSES:
                _decrement_product(conn, line["product_id"], int(line["quantite"]))
            sale["items"].append(
                _items.insert_with(
                    conn,
                    {
                        "vente_id": sale["id"],
                        "product_id": line.get("product_id"),
                        "service_id": line.get("service_id"),
                        "quantite": int(line["quantite"]),
                        "prix_unitaire": float(line["prix_unitaire"]),
                    },
                )
            )
        if status == PAID_STATUS:
            _credit_client(conn, values["client_id"], net)
    logger.info("Vente %s enregistrée (%s, net=%.0f)", sale["id"], values["type"], net)
    return sale


def update_status(sale_id: str, status: str) -> dict[str, Any]:
    """Change le statut d'une vente dans une seule transaction.

    Passage à ``paye`` : le client est crédité. Sortie de ``paye`` : il est débité.
    Passage à ``annule`` / ``rembourse`` : les produits retournent en stock, et
    sont de nouveau prélevés si la vente est réactivée.
    """
    with get_engine().begin() as conn:
        try:
            current = _sales.fetch_by_id(conn, sale_id, for_update=True)
        except RecordNotFound as exc:
            raise SaleNotFound(f"Vente {sale_id} introuvable.") from exc
        previous = current.get("status")
        was_reversed = previous in REVERSED_STATUSES
        if status in REVERSED_STATUSES and not was_reversed:
            _restock_lines(conn, sale_id)
        elif was_reversed and status not in REVERSED_STATUSES:
            for line in _items.find_by(conn, "vente_id", sale_id):
                if line.get("product_id"):
                    _decrement_product(conn, line["product_id"], int(line.get("quantite") or 0))
        record = _sales.update_with(conn, sale_id, {"status": status})
        net = float(current.get("total_net") or 0)
        if previous != PAID_STATUS and status == PAID_STATUS:
            _credit_client(conn, current.get("client_id"), net)
        elif previous == PAID_STATUS and status != PAID_STATUS:
            _debit_client(conn, current.get("client_id"), net)
    logger.info("Vente %s : %s -> %s", sale_id, previous, status)
    return record


def delete_sale(sale_id: str) -> None:
    """Supprime la vente et ses lignes ; le stock et le total client sont rétablis."""
    with get_engine().begin() as conn:
        try:
            current = _sales.fetch_by_id(conn, sale_id, for_update=True)
        except RecordNotFound as exc:
            raise SaleNotFound(f"Vente {sale_id} introuvable.") from exc
        if current.get("status") not in REVERSED_STATUSES:
            _restock_lines(conn, sale_id)
        if current.get("status") == PAID_STATUS:
            _debit_client(conn, current.get("client_id"), float(current.get("total_net") or 0))
        conn.execute(text(f"DELETE FROM {SALE_ITEMS.quoted} WHERE vente_id = :id"), {"id": sale_id})
        try:
            _sales.delete_with(conn, sale_id)
        except RecordNotFound as exc:
            raise SaleNotFound(f"Vente {sale_id} introuvable.") from exc
    logger.info("Vente %s supprimée", sale_id)


__all__ = [
    "InsufficientStock",
    "SaleNotFound",
    "SaleServiceError",
    "compute_totals",
    "create_sale",
    "delete_sale",
    "derive_sale_type",
    "get_sale",
    "list_sales_page",
    "update_status",
]
