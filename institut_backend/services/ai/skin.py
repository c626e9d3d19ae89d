"""Diagnostic de peau sur photo et produits conseillés."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any

from institut_core import gemini_client
from institut_core.data_repository import df_records

from . import data
from .common import AIRequestError, AIResponseError

logger = logging.getLogger(__name__)

SKIN_MIME_TYPE = "image/jpeg"
PER_NEED_LIMIT = 3
GENERAL_LIMIT = 5
MAX_RECOMMENDATIONS = 6

# (score, seuil, mots-clés recherchés dans le nom du produit)
NEEDS = (
    ("secheresse_score", 7, ("hydratant",)),
    ("rougeurs_score", 6, ("apaisant", "calmant", "sensible")),
    ("eclat_score", 6, ("eclaircissant", "eclat", "illuminant")),
)

PROMPT = """Analyse cette image de peau et détecte les signes de sécheresse, de rougeurs et de manque d'éclat.
Fournis un score de 1 à 10 pour chaque catégorie où 10 signifie très sévère.

Réponds UNIQUEMENT au format JSON suivant (pas de texte avant ou après):
{
  "secheresse_score": <nombre entre 1 et 10>,
  "rougeurs_score": <nombre entre 1 et 10>,
  "eclat_score": <nombre entre 1 et 10>,
  "interpretation_texte": "Une interprétation détaillée en français expliquant les résultats"
}"""


def _score(analysis: dict[str, Any], key: str) -> float:
    try:
        return float(analysis.get(key) or 0)
    except (TypeError, ValueError):
        return 0.0


def recommend_products(analysis: dict[str, Any]) -> list[dict[str, Any]]:
    """Produits ciblés par besoin, dédoublonnés ; à défaut quelques produits généraux."""
    selected: list[dict[str, Any]] = []
    seen: set[str] = set()
    for key, threshold, keywords in NEEDS:
        if _score(analysis, key) < threshold:
            continue
        for product in df_records(data.products_matching(keywords, limit=PER_NEED_LIMIT)):
            product_id = str(product.get("id"))
            if product_id in seen:
                continue
            seen.add(product_id)
            selected.append(product)
    if not selected:
        selected = df_records(data.active_products(limit=GENERAL_LIMIT))
    return selected[:MAX_RECOMMENDATIONS]


def analyse(image: str | None) -> dict[str, Any]:
    if not image:
        raise AIRequestError("L'image est obligatoire")
    payload = image.split(",", 1)[1] if "," in image else image
    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise AIRequestError("Image base64 invalide") from exc

    text = gemini_client.generate_with_image(PROMPT, raw, SKIN_MIME_TYPE)
    analysis = gemini_client.extract_json(text)
    if analysis is None:
        raise AIResponseError("Erreur lors de l'analyse de la réponse de l'IA")
    analysis.setdefault("interpretation_texte", "")
    for key, _, _ in NEEDS:
        analysis[key] = _score(analysis, key)
    return {"analysis": analysis, "recommended_products": recommend_products(analysis)}
