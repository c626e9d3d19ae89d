"""Helpers d'affichage produit pour le catalogue public (site web)."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Mapping

LOW_STOCK_THRESHOLD = 10
THOUSANDS_SEPARATOR = "\u202f"  # espace fine insécable (format fr-FR)


def should_show_on_website(product: Mapping[str, Any]) -> bool:
    return bool(
        product.get("show_to_website")
        and product.get("is_active")
        and product.get("status") == "active"
        and (product.get("stock_quantity") or 0) > 0
    )


def format_product_price(price: float | int | None, currency: str = "f") -> str:
    """Formate un prix FCFA sans décimales : ``12500`` -> ``12 500f``."""
    amount = Decimal(str(price or 0)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    formatted = f"{int(amount):,}".replace(",", THOUSANDS_SEPARATOR)
    return formatted + ("f" if currency == "f" else "")


def get_product_availability(stock_quantity: float | int | None) -> dict[str, str]:
    stock = stock_quantity or 0
    if stock <= 0:
        return {"status": "out-of-stock", "label": "Rupture de stock", "color": "red"}
    if stock < LOW_STOCK_THRESHOLD:
        return {"status": "low-stock", "label": "Stock faible", "color": "orange"}
    return {"status": "in-stock", "label": "En stock", "color": "green"}


def decorate_for_website(product: Mapping[str, Any]) -> dict[str, Any]:
    """Ajoute disponibilité et prix formaté à une ligne produit."""
    record = dict(product)
    record["availability"] = get_product_availability(record.get("stock_quantity"))
    record["formatted_price"] = format_product_price(record.get("price"))
    return record
