"""Reusable sample datasets for service-level tests."""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - for type checkers only
    import pandas as pd  # noqa: F401


def _pd():
    """Lazy import pandas to avoid hard dependency during collection."""

    try:
        return importlib.import_module("pandas")
    except ModuleNotFoundError as exc:  # pragma: no cover - tests skip beforehand
        raise RuntimeError("pandas is required for sample datasets") from exc


def make_products_df() -> pd.DataFrame:
    """Catalogue déterministe : soins, cheveux, un produit en rupture."""

    pd = _pd()
    return pd.DataFrame(
        [
            {
                "id": "p1",
                "name": "Crème hydratante karité",
                "description": "Hydratation intense",
                "brand": "Dakar Skin",
                "price": 12500,
                "cost": 6000,
                "stock_quantity": 3,
                "category_id": "c-soins",
                "images": [],
                "status": "active",
                "sku": "SOI-CRE-101",
                "category_name": "Soins",
            },
            {
                "id": "p2",
                "name": "Sérum éclat vitamine C",
                "description": "Teint lumineux",
                "brand": "Dakar Skin",
                "price": 18000,
                "cost": 8000,
                "stock_quantity": 25,
                "category_id": "c-soins",
                "images": [],
                "status": "active",
                "sku": "SOI-SER-202",
                "category_name": "Soins",
            },
            {
                "id": "p3",
                "name": "Shampoing doux",
                "description": "Cheveux crépus",
                "brand": "Baobab",
                "price": 5000,
                "cost": 2000,
                "stock_quantity": 0,
                "category_id": "c-cheveux",
                "images": [],
                "status": "active",
                "sku": "CHE-SHA-303",
                "category_name": "Cheveux",
            },
        ]
    )


def make_sales_df(rows: list[tuple[str, float]]) -> pd.DataFrame:
    """Ventes payées à partir de couples (date ISO, total net)."""

    pd = _pd()
    return pd.DataFrame(
        [
            {
                "id": f"s{index}",
                "date": pd.Timestamp(day),
                "total_net": amount,
                "total_brut": amount,
                "reduction": 0,
                "client_id": None,
                "user_id": "u1",
            }
            for index, (day, amount) in enumerate(rows, start=1)
        ],
        columns=["id", "date", "total_net", "total_brut", "reduction", "client_id", "user_id"],
    )


def make_expenses_df(rows: list[tuple[str, float]]) -> pd.DataFrame:
    pd = _pd()
    return pd.DataFrame(
        [{"date": pd.Timestamp(day), "montant": amount} for day, amount in rows],
        columns=["date", "montant"],
    )


def empty_df(columns: list[str]) -> pd.DataFrame:
    return _pd().DataFrame(columns=columns)
