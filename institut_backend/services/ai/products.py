"""Produits : recommandation, doublons, prix conseillé et lecture d'emballage."""

from __future__ import annotations

import logging
from typing import Any

import pandas as pd

from institut_core import gemini_client
from institut_core.data_repository import df_records
from institut_core.image_utils import ImageDecodeError, compress_image, decode_data_url

from . import data
from .common import AIRequestError, to_prompt_json

logger = logging.getLogger(__name__)

DUPLICATE_POOL = 1000
SIMILAR_PRICE_POOL = 50
SIMILAR_PRICE_LIMIT = 10
STANDARD_MARGIN = 0.65
MIN_IMAGE_LENGTH = 100
MAX_IMAGE_BYTES = 2 * 1024 * 1024
DEFAULT_CATEGORIES = "Hygiène, Soin du visage, Soin du corps, Soin des cheveux, Solaire"

EMPTY_PRODUCT_SHEET: dict[str, Any] = {
    "name": "",
    "brand": "",
    "description": "",
    "tranchePrincipale": "",
    "form": "",
    "benefits": [],
    "category": "",
    "skinTypes": [],
    "sku": "",
    "volume": "",
}


def _as_product(record: dict[str, Any]) -> dict[str, Any]:
    product = {key: value for key, value in record.items() if key != "category_name"}
    product["category"] = {"name": record.get("category_name")} if record.get("category_name") else None
    return product


def recommend(query: str | None) -> dict[str, Any]:
    """Recommande le produit publié le plus adapté à la demande."""
    if not query or not query.strip():
        raise AIRequestError("La demande est obligatoire")
    products = df_records(data.active_products())
    catalogue = [
        {
            "name": p.get("name") or "",
            "description": p.get("description") or "",
            "price": p.get("price") or 0,
            "category": p.get("category_name") or "",
            "images": p.get("images") or [],
        }
        for p in products
    ]
    prompt = f"""Tu es un assistant expert en cosmétiques et soins de la peau.
L'utilisateur demande: "{query}"

Voici les produits disponibles dans notre base de données:
{to_prompt_json(catalogue)}

Tâches:
1. Analyse la demande de l'utilisateur
2. Recommande le produit le plus approprié de notre base de données
3. Si aucun produit ne correspond exactement, suggère le produit le plus proche
4. Fournis une explication claire en français

Réponds au format JSON suivant:
{{
  "response": "Ton explication textuelle détaillée de la recommandation",
  "productName": "Nom exact du produit recommandé (doit correspondre exactement à un nom dans la base de données)"
}}"""

    text = gemini_client.generate_text(prompt)
    parsed = gemini_client.extract_json(text) or {"response": text, "productName": None}
    wanted = str(parsed.get("productName") or "").strip().lower()
    match = None
    if wanted:
        match = next((p for p in products if str(p.get("name") or "").strip().lower() == wanted), None)
    return {
        "response": parsed.get("response") or text,
        "product": _as_product(match) if match else None,
    }


def check_duplicates(product_data: dict[str, Any] | None) -> dict[str, Any]:
    if not product_data:
        raise AIRequestError("Les données du produit sont obligatoires")
    existing = data.active_products(only_published=False, limit=DUPLICATE_POOL)
    if existing.empty:
        return {"duplicates": [], "has_duplicates": False, "message": "Aucun produit existant pour comparaison"}

    catalogue = [
        {
            "id": str(row["id"]),
            "name": row.get("name") or "",
            "description": row.get("description") or "",
            "brand": row.get("brand") or "",
            "price": row.get("price") or 0,
        }
        for row in df_records(existing)
    ]
    prompt = f"""Tu es un assistant expert en détection de doublons de produits cosmétiques.

Produit à vérifier:
- Nom: "{product_data.get("name") or ""}"
- Description: "{product_data.get("description") or ""}"
- Marque: "{product_data.get("brand") or ""}"
- Prix: {product_data.get("price") or 0}

Produits existants dans la base de données:
{to_prompt_json(catalogue)}

Tâches:
1. Compare le nouveau produit avec les produits existants
2. Détecte les doublons probables (même produit sous différents noms ou variations)
3. Analyse sémantique des noms et descriptions pour trouver des similarités
4. Calcule un score de similarité de 0 à 100 pour chaque produit similaire
5. Identifie les produits qui pourraient être le même (score > 70)

Réponds au format JSON strict suivant (sans markdown):
{{
  "duplicates": [{{"productId": "id du produit", "productName": "nom du produit", "similarityScore": 85,
    "reason": "Explication de la similarité"}}],
  "hasDuplicates": true,
  "message": "Message d'analyse"
}}"""

    result, _ = gemini_client.generate_json(
        prompt, {"duplicates": [], "hasDuplicates": False, "message": "Aucun doublon détecté"}
    )
    return {
        "duplicates": result.get("duplicates") or [],
        "has_duplicates": bool(result.get("hasDuplicates")),
        "message": result.get("message") or "Analyse terminée",
    }


def similar_products(product_data: dict[str, Any], pool: pd.DataFrame) -> list[dict[str, Any]]:
    """Produits comparables : même catégorie si connue, sinon même marque, au plus 10."""
    category_id = product_data.get("category_id")
    brand = str(product_data.get("brand") or "").strip().lower()
    selected = []
    for row in df_records(pool):
        if category_id and row.get("category_id"):
            keep = str(row["category_id"]) == str(category_id)
        elif brand and row.get("brand"):
            keep = str(row["brand"]).strip().lower() == brand
        else:
            keep = True
        if keep:
            selected.append({
                "name": row.get("name") or "",
                "price": row.get("price") or 0,
                "cost": row.get("cost") or 0,
                "brand": row.get("brand") or "",
            })
        if len(selected) >= SIMILAR_PRICE_LIMIT:
            break
    return selected


def fallback_price(product_data: dict[str, Any], similar_count: int) -> dict[str, Any]:
    cost = float(product_data.get("cost") or 0)
    return {
        "recommendedPrice": round(cost * (1 + STANDARD_MARGIN)),
        "currentPrice": product_data.get("price") or 0,
        "cost": cost,
        "recommendedMargin": round(STANDARD_MARGIN * 100),
        "priceAssessment": "normal",
        "priceRationale": "Prix calculé avec marge standard de 65%",
        "promotionSuggestions": [],
        "warnings": [],
        "comparisonData": {"similarProductsCount": similar_count, "averagePrice": 0, "minPrice": 0, "maxPrice": 0},
    }


def recommend_price(product_data: dict[str, Any] | None) -> dict[str, Any]:
    if not product_data:
        raise AIRequestError("Les données du produit sont obligatoires")
    similar = similar_products(product_data, data.active_products(limit=SIMILAR_PRICE_POOL))
    category = data.category_name(product_data.get("category_id"))
    prompt = f"""Tu es un assistant expert en stratégie de prix pour produits cosmétiques et de beauté.

Produit à analyser:
- Nom: "{product_data.get("name") or ""}"
- Description: "{product_data.get("description") or ""}"
- Marque: "{product_data.get("brand") or ""}"
- Catégorie: "{category or "Non spécifiée"}"
- Coût de revient: {product_data.get("cost") or 0} FCFA
- Prix actuel proposé: {product_data.get("price") or 0} FCFA

Produits similaires dans la base:
{to_prompt_json(similar)}

Tâches:
1. Analyse les prix similaires dans la base de données
2. Calcule un prix recommandé basé sur la marge cible standard (50-70% pour cosmétiques), les prix du marché et le positionnement du produit
3. Détecte si le prix proposé est anormalement bas ou élevé
4. Recommande des promotions potentielles si approprié
5. Calcule la marge pour le prix recommandé

Réponds au format JSON strict suivant (sans markdown):
{{
  "recommendedPrice": 5000,
  "currentPrice": {product_data.get("price") or 0},
  "cost": {product_data.get("cost") or 0},
  "recommendedMargin": 65,
  "marketAveragePrice": 5500,
  "priceAssessment": "normal|low|high",
  "priceRationale": "Explication détaillée du prix recommandé",
  "promotionSuggestions": [{{"type": "pourcentage|fixe", "amount": 10, "reason": "..."}}],
  "warnings": ["..."],
  "comparisonData": {{"similarProductsCount": {len(similar)}, "averagePrice": 0, "minPrice": 0, "maxPrice": 0}}
}}"""

    result, _ = gemini_client.generate_json(prompt, fallback_price(product_data, len(similar)))
    return result


def _image_prompt(categories: str) -> str:
    return f"""Tu es un assistant expert en cosmétiques et produits de beauté.
Analyse cette image de produit cosmétique et extrais TOUTES les informations visibles sur l'emballage.

Instructions détaillées:
1. NOM DU PRODUIT: nom complet tel qu'écrit sur l'emballage (marque + nom exact du produit)
2. MARQUE: la marque si visible
3. DESCRIPTION COMPLÈTE ET DÉTAILLÉE (2-3 paragraphes): ce que fait le produit, ses ingrédients clés et leurs actions, comment il fonctionne, les résultats attendus, le mode d'emploi si visible
4. TRANCHE PRINCIPALE parmi: "Soin du visage", "Soin du corps", "Soin des cheveux", "Hygiène", "Solaire", "Parfum", "Maquillage"
5. FORME parmi: "Crème", "Gel", "Lotion", "Sérum", "Huile", "Masque", "Mousse", "Tonique", "Eau micellaire", "Gommage / Exfoliant", "Lait", "Beurre", "Baume", "Shampoing", "Après-shampoing", "Spray", "Crème coiffante", "Gel / Cire coiffante", "Huile de massage", "Bain moussant / Sels de bain", "Contour des yeux"
6. BÉNÉFICES parmi: "Hydratant", "Nourrissant", "Purifiant", "Anti-âge", "Éclaircissant", "Apaisant", "Matifiant", "Réparateur", "Anti-taches", "Démaquillant", "Raffermissant", "Exfoliant", "Régénérant", "Anti-vergetures", "Nettoyant", "Anti-chute", "Lissant", "Volume", "Brillance", "Anti-frisottis"
7. TYPES DE PEAU ciblés: "Peau normale", "Peau sèche", "Peau grasse", "Peau mixte", "Peau sensible", "Peau mature", "Peau déshydratée", "Peau sujette à l'acné", "Peau hyperpigmentée"
8. CATÉGORIE exacte parmi: {categories}
9. SKU: code produit ou référence si visible
10. VOLUME: volume ou poids si visible (ex: '200ml', '50g')

Réponds AU FORMAT JSON STRICT suivant (ne mets pas de markdown, juste du JSON pur):
{{
  "name": "", "brand": "", "description": "", "tranchePrincipale": "", "form": "",
  "benefits": [], "category": "", "skinTypes": [], "sku": "", "volume": ""
}}

IMPORTANT: si une information n'est pas visible, utilise une chaîne vide "" ou un tableau vide []."""


def analyse_image(image_base64: Any) -> dict[str, Any]:
    """Extrait la fiche produit d'une photo d'emballage."""
    if not isinstance(image_base64, str) or len(image_base64) < MIN_IMAGE_LENGTH:
        raise AIRequestError("Format d'image invalide")
    payload = image_base64.split(",", 1)[1] if "," in image_base64 else image_base64
    if len(payload) < MIN_IMAGE_LENGTH:
        raise AIRequestError("Données d'image base64 invalides")
    try:
        image = decode_data_url(image_base64)
        if len(image.data) > MAX_IMAGE_BYTES:
            image = compress_image(image.data, mime_type=image.mime_type)
    except ImageDecodeError as exc:
        raise AIRequestError(str(exc)) from exc

    categories = ", ".join(data.product_category_names()) or DEFAULT_CATEGORIES
    text = gemini_client.generate_with_image(_image_prompt(categories), image.data, image.mime_type)
    parsed = gemini_client.extract_json(text)
    if parsed is None:
        logger.warning("Analyse d'image : aucun JSON exploitable, fiche vide renvoyée")
        return dict(EMPTY_PRODUCT_SHEET)
    return parsed
