"""Génération et validation des codes produits (SKU, code-barres, références de stock)."""

from __future__ import annotations

import random
import re
import string
from datetime import datetime

DEFAULT_PREFIXES: dict[str, str] = {
    "cheveux": "CHE",
    "soins": "SOI",
    "maquillage": "MAQ",
    "parfum": "PAR",
    "accessoires": "ACC",
    "outils": "OUT",
    "produits": "PRO",
    "services": "SER",
}

SKU_PATTERN = re.compile(r"^[A-Z]{3}-[A-Z]{3}-\d{3}$")
BARCODE_PATTERN = re.compile(r"^\d{13}$")
STOCK_REF_PATTERN = re.compile(r"^STK-\d{8}-\d{2}[A-Z]$")
BATCH_CODE_PATTERN = re.compile(r"^STK-\d{8}-\d{2}[A-Z]-\d{3}[A-Z]$")
GIFT_CARD_PATTERN = re.compile(r"^GC-[A-Z0-9]{4}-[A-Z0-9]{4}$")

_rng = random.SystemRandom()


def _three_letters(value: str) -> str:
    letters = re.sub(r"[^A-Z]", "", (value or "").upper())
    return letters[:3].ljust(3, "X")


def get_category_prefix(category_name: str | None) -> str:
    """Préfixe de 3 lettres pour une catégorie (table connue, puis correspondance partielle)."""
    normalized = (category_name or "").strip().lower()
    if normalized in DEFAULT_PREFIXES:
        return DEFAULT_PREFIXES[normalized]
    if normalized:
        for key, prefix in DEFAULT_PREFIXES.items():
            if key in normalized or normalized in key:
                return prefix
    return _three_letters(normalized)


def generate_sku_with_prefix(prefix: str, product_name: str) -> str:
    number = _rng.randint(100, 999)
    return f"{_three_letters(prefix)}-{_three_letters(product_name)}-{number}"


def generate_sku(category_name: str | None, product_name: str) -> str:
    """SKU au format ``CAT-ABR-NNN`` (ex: ``CHE-SHA-482``)."""
    return generate_sku_with_prefix(get_category_prefix(category_name), product_name)


def generate_barcode(now: datetime | None = None) -> str:
    """Code-barres à 13 chiffres dérivé de l'horodatage (YYYYMMDDHHMMSS + ms, tronqué)."""
    now = now or datetime.now()
    stamp = now.strftime("%Y%m%d%H%M%S") + f"{now.microsecond // 1000:03d}"
    return stamp[:13]


def generate_stock_ref(now: datetime | None = None) -> str:
    """Référence de réception ``STK-YYYYMMDD-NNL``."""
    now = now or datetime.now()
    number = _rng.randint(0, 99)
    letter = _rng.choice(string.ascii_uppercase)
    return f"STK-{now.strftime('%Y%m%d')}-{number:02d}{letter}"


def generate_batch_code(stock_ref: str, product_sku: str | None) -> str:
    """Code de lot : référence de stock + dernier segment du SKU + lettre aléatoire."""
    suffix = "000"
    if product_sku:
        last = product_sku.split("-")[-1]
        if last:
            suffix = last
    return f"{stock_ref}-{suffix}{_rng.choice(string.ascii_uppercase)}"


def generate_gift_card_code() -> str:
    alphabet = string.ascii_uppercase + string.digits
    first = "".join(_rng.choice(alphabet) for _ in range(4))
    second = "".join(_rng.choice(alphabet) for _ in range(4))
    return f"GC-{first}-{second}"


def generate_loyalty_card_number(now: datetime | None = None) -> str:
    now = now or datetime.now()
    tail = "".join(_rng.choice(string.digits) for _ in range(4))
    return f"FID-{now.strftime('%Y%m%d')}-{tail}"


def validate_sku(sku: str) -> bool:
    return bool(SKU_PATTERN.match(sku or ""))


def validate_barcode(barcode: str) -> bool:
    return bool(BARCODE_PATTERN.match(barcode or ""))


def validate_stock_ref(stock_ref: str) -> bool:
    return bool(STOCK_REF_PATTERN.match(stock_ref or ""))


def validate_batch_code(batch_code: str) -> bool:
    return bool(BATCH_CODE_PATTERN.match(batch_code or ""))


def normalize_gift_card_code(code: str) -> str:
    return (code or "").strip().upper()


__all__ = [
    "DEFAULT_PREFIXES",
    "generate_barcode",
    "generate_batch_code",
    "generate_gift_card_code",
    "generate_loyalty_card_number",
    "generate_sku",
    "generate_sku_with_prefix",
    "generate_stock_ref",
    "get_category_prefix",
    "normalize_gift_card_code",
    "validate_barcode",
    "validate_batch_code",
    "validate_sku",
    "validate_stock_ref",
]
