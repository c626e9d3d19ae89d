import base64
import io

import pandas as pd
import pytest

from institut_backend.services.ai import products, proxy, skin
from institut_backend.services.ai.common import AIRequestError, AIResponseError
from institut_core import gemini_client
from tests import sample_data


@pytest.fixture
def catalogue(monkeypatch):
    df = sample_data.make_products_df()
    monkeypatch.setattr(products.data, "active_products", lambda **kwargs: df)
    return df


def _reply(monkeypatch, text):
    monkeypatch.setattr(gemini_client, "generate_text", lambda prompt, **kwargs: text)


def test_recommend_matches_product_case_insensitively(monkeypatch, catalogue):
    _reply(monkeypatch, '{"response": "Essayez ce sérum.", "productName": "  sérum éclat VITAMINE C "}')

    result = products.recommend("peau terne")

    assert result["response"] == "Essayez ce sérum."
    assert result["product"]["id"] == "p2"
    assert result["product"]["category"] == {"name": "Soins"}


def test_recommend_without_json_returns_raw_text(monkeypatch, catalogue):
    _reply(monkeypatch, "Je recommande un soin hydratant.")
    result = products.recommend("peau sèche")
    assert result == {"response": "Je recommande un soin hydratant.", "product": None}


def test_recommend_requires_query():
    with pytest.raises(AIRequestError):
        products.recommend("")


def test_duplicate_check_without_existing_products(monkeypatch):
    monkeypatch.setattr(products.data, "active_products", lambda **kwargs: pd.DataFrame())
    result = products.check_duplicates({"name": "Crème"})
    assert result == {"duplicates": [], "has_duplicates": False, "message": "Aucun produit existant pour comparaison"}


def test_duplicate_check_maps_gemini_reply(monkeypatch, catalogue):
    _reply(
        monkeypatch,
        '{"duplicates": [{"productId": "p1", "productName": "Crème hydratante karité", "similarityScore": 92,'
        ' "reason": "même produit"}], "hasDuplicates": true, "message": "1 doublon"}',
    )
    result = products.check_duplicates({"name": "Creme hydratante au karite", "brand": "Dakar Skin"})
    assert result["has_duplicates"] is True
    assert result["duplicates"][0]["productId"] == "p1"


def test_similar_products_prefers_category_then_brand(catalogue):
    by_category = products.similar_products({"category_id": "c-cheveux"}, catalogue)
    assert [p["name"] for p in by_category] == ["Shampoing doux"]

    by_brand = products.similar_products({"brand": "dakar skin"}, catalogue)
    assert len(by_brand) == 2


def test_price_fallback_uses_standard_margin(monkeypatch, catalogue):
    monkeypatch.setattr(products.data, "category_name", lambda category_id: "Soins")
    _reply(monkeypatch, "pas de json")

    result = products.recommend_price({"name": "Lait corporel", "cost": 4000, "price": 7000, "category_id": "c-soins"})

    assert result["recommendedPrice"] == 6600
    assert result["recommendedMargin"] == 65
    assert result["currentPrice"] == 7000
    assert result["comparisonData"]["similarProductsCount"] == 2


def test_product_image_rejects_short_payload():
    with pytest.raises(AIRequestError):
        products.analyse_image("data:image/png;base64,abc")
    with pytest.raises(AIRequestError):
        products.analyse_image(None)


def _jpeg_data_url() -> str:
    from PIL import Image

    buffer = io.BytesIO()
    Image.new("RGB", (64, 64), (240, 200, 180)).save(buffer, format="JPEG")
    return "data:image/jpeg;base64," + base64.b64encode(buffer.getvalue()).decode()


def test_product_image_returns_empty_sheet_on_unparseable_reply(monkeypatch):
    pytest.importorskip("PIL")
    seen = {}

    def fake_generate(prompt, image, mime_type):
        seen.update(prompt=prompt, mime_type=mime_type)
        return "illisible"

    monkeypatch.setattr(products.data, "product_category_names", lambda: ["Soins", "Cheveux"])
    monkeypatch.setattr(gemini_client, "generate_with_image", fake_generate)

    result = products.analyse_image(_jpeg_data_url())

    assert result == products.EMPTY_PRODUCT_SHEET
    assert result is not products.EMPTY_PRODUCT_SHEET
    assert seen["mime_type"] == "image/jpeg"
    assert "CATÉGORIE exacte parmi: Soins, Cheveux" in seen["prompt"]


def test_skin_recommendations_by_need(monkeypatch):
    calls = []

    def fake_matching(keywords, limit=3):
        calls.append(tuple(keywords))
        rows = {"hydratant": [{"id": "p1", "name": "Crème hydratante"}], "apaisant": [{"id": "p1", "name": "Crème hydratante"}, {"id": "p4", "name": "Baume apaisant"}]}
        return pd.DataFrame(rows.get(keywords[0], []))

    monkeypatch.setattr(skin.data, "products_matching", fake_matching)

    selected = skin.recommend_products({"secheresse_score": 8, "rougeurs_score": 6, "eclat_score": 5})

    assert calls == [("hydratant",), ("apaisant", "calmant", "sensible")]
    assert [p["id"] for p in selected] == ["p1", "p4"]


def test_skin_recommendations_fall_back_to_general_products(monkeypatch):
    monkeypatch.setattr(skin.data, "products_matching", lambda keywords, limit=3: pd.DataFrame())
    monkeypatch.setattr(skin.data, "active_products", lambda **kwargs: sample_data.make_products_df())

    selected = skin.recommend_products({"secheresse_score": 2, "rougeurs_score": 1, "eclat_score": 1})

    assert len(selected) == 3


def test_skin_analysis(monkeypatch):
    monkeypatch.setattr(
        gemini_client,
        "generate_with_image",
        lambda prompt, image, mime_type: '```json\n{"secheresse_score": 7, "rougeurs_score": "3", "eclat_score": 2,'
        ' "interpretation_texte": "Peau sèche"}\n```',
    )
    monkeypatch.setattr(skin.data, "products_matching", lambda keywords, limit=3: pd.DataFrame([{"id": "p1"}]))

    image = "data:image/jpeg;base64," + base64.b64encode(b"fake-jpeg").decode()
    result = skin.analyse(image)

    assert result["analysis"]["rougeurs_score"] == 3.0
    assert result["recommended_products"] == [{"id": "p1"}]


def test_skin_analysis_errors(monkeypatch):
    with pytest.raises(AIRequestError):
        skin.analyse("data:image/jpeg;base64,%%%")

    monkeypatch.setattr(gemini_client, "generate_with_image", lambda prompt, image, mime_type: "aucun json")
    with pytest.raises(AIResponseError):
        skin.analyse(base64.b64encode(b"fake").decode())


def test_proxy_text_and_multimodal(monkeypatch):
    monkeypatch.setattr(gemini_client, "generate_text", lambda prompt: f"echo:{prompt}")
    monkeypatch.setattr(gemini_client, "generate_with_image", lambda prompt, image, mime_type: f"{mime_type}:{image!r}")

    assert proxy.generate("Bonjour") == {"text": "echo:Bonjour"}
    image = "data:image/png;base64," + base64.b64encode(b"img").decode()
    assert proxy.generate("Décris", image=image, mode="multimodal") == {"text": "image/jpeg:b'img'"}
    # en mode texte l'image est ignorée
    assert proxy.generate("Bonjour", image=image) == {"text": "echo:Bonjour"}

    with pytest.raises(AIRequestError):
        proxy.generate("   ")
