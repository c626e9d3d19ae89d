"""Tests de bout en bout des routeurs FastAPI (services remplacés par des doublures)."""

from __future__ import annotations

import pytest

pytest.importorskip("fastapi")

from institut_core.gemini_client import GeminiNotConfigured
from institut_core.repositories.base import PagedResult, RecordNotFound
from institut_core.repositories.users import UserProfile


CLIENT_ROW = {
    "id": "c1",
    "first_name": "Awa",
    "last_name": "Traoré",
    "email": "awa@example.com",
    "phone": "+22370000000",
    "total_spent": 45000,
    "is_active": True,
}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_routes_require_authentication(client):
    assert client.get("/clients").status_code == 401


def test_list_clients_returns_page_meta(authenticated_client, monkeypatch):
    captured = {}

    def fake_page(**kwargs):
        captured.update(kwargs)
        return PagedResult(items=[CLIENT_ROW], total=21, page=2, per_page=10)

    monkeypatch.setattr("institut_backend.services.clients.list_clients_page", fake_page)

    response = authenticated_client.get("/clients", params={"search": "awa", "page": 2, "per_page": 10})

    assert response.status_code == 200
    body = response.json()
    assert body["items"][0]["first_name"] == "Awa"
    assert body["meta"] == {"page": 2, "per_page": 10, "total": 21, "total_pages": 3}
    assert captured["search"] == "awa"


def test_missing_record_is_404(authenticated_client, monkeypatch):
    def missing(client_id):
        raise RecordNotFound(f"Client {client_id} introuvable")

    monkeypatch.setattr("institut_backend.services.clients.get_client", missing)

    response = authenticated_client.get("/clients/zz")
    assert response.status_code == 404
    assert "introuvable" in response.json()["detail"]


def test_caissiere_can_sell_but_not_read_finances(as_role, monkeypatch):
    from institut_backend.services import sales

    def fake_create(payload, items, *, user_id):
        return {
            "id": "v1",
            "client_id": payload["client_id"],
            "user_id": user_id,
            "date": "2026-03-02T10:00:00",
            "type": "produit",
            "total_brut": 15000,
            "reduction": 0,
            "total_net": 15000,
            "methode_paiement": "especes",
            "status": "paye",
            "items": [],
        }

    monkeypatch.setattr(sales, "create_sale", fake_create)
    client = as_role("caissiere")

    response = client.post(
        "/sales",
        json={"client_id": "c1", "items": [{"product_id": "p1", "quantite": 1, "prix_unitaire": 15000}]},
    )
    assert response.status_code == 201
    assert response.json()["user_id"] == "caissiere-1"

    assert client.get("/finance/summary").status_code == 403


def test_sale_with_insufficient_stock_is_conflict(authenticated_client, monkeypatch):
    from institut_backend.services import sales

    def short(payload, items, *, user_id):
        raise sales.InsufficientStock("Stock insuffisant pour Crème hydratante karité")

    monkeypatch.setattr(sales, "create_sale", short)

    response = authenticated_client.post(
        "/sales",
        json={"items": [{"product_id": "p1", "quantite": 9, "prix_unitaire": 6000}]},
    )
    assert response.status_code == 409


def test_sale_line_needs_exactly_one_target(authenticated_client):
    response = authenticated_client.post(
        "/sales",
        json={"items": [{"product_id": "p1", "service_id": "s1", "quantite": 1, "prix_unitaire": 1}]},
    )
    assert response.status_code == 422


def test_website_catalog_is_public(client, monkeypatch):
    product = {
        "id": "p2",
        "name": "Sérum éclat vitamine C",
        "price": 12500,
        "stock_quantity": 25,
        "category": {"name": "Soins"},
        "availability": {"status": "in_stock", "label": "En stock", "color": "green"},
        "formatted_price": "12 500 FCFA",
    }
    monkeypatch.setattr(
        "institut_backend.services.catalog.list_website_products", lambda category_id=None: [product]
    )

    response = client.get("/catalog/website/products")

    assert response.status_code == 200
    assert response.json()[0]["availability"]["label"] == "En stock"


def test_dashboard_is_reserved_to_admin_roles(as_role):
    assert as_role("employee").get("/dashboard/summary").status_code == 403


def test_business_query_uses_capped_role(as_role, monkeypatch):
    from institut_backend.services.ai import business

    seen = {}

    def fake_answer(query, role):
        seen["role"] = role
        return f"réponse à {query}"

    monkeypatch.setattr(business, "answer", fake_answer)

    response = as_role("manager").post("/api/ai/business-query", json={"query": "CA du jour", "userRole": "superadmin"})

    assert response.status_code == 200
    assert response.json() == {"response": "réponse à CA du jour"}
    assert seen["role"] == "manager"


def test_smart_alerts_forbidden_for_caissiere(as_role):
    response = as_role("caissiere").post("/api/ai/smart-alerts", json={})
    assert response.status_code == 403


def test_missing_gemini_key_is_500(authenticated_client, monkeypatch):
    from institut_backend.services.ai import business

    def not_configured(query, role):
        raise GeminiNotConfigured("GEMINI_API_KEY manquant")

    monkeypatch.setattr(business, "answer", not_configured)

    response = authenticated_client.post("/api/ai/business-query", json={"query": "bonjour"})
    assert response.status_code == 500
    assert "GEMINI_API_KEY" in response.json()["detail"]


def test_duplicate_check_uses_camel_case(authenticated_client, monkeypatch):
    from institut_backend.services.ai import products

    monkeypatch.setattr(
        products,
        "check_duplicates",
        lambda data: {"duplicates": [], "has_duplicates": False, "message": "Aucun doublon"},
    )

    response = authenticated_client.post("/api/ai/product-duplicate-check", json={"productData": {"name": "x"}})

    assert response.status_code == 200
    assert response.json()["hasDuplicates"] is False


def test_skin_analysis_response_shape(authenticated_client, monkeypatch):
    from institut_backend.services.ai import skin

    monkeypatch.setattr(
        skin,
        "analyse",
        lambda image: {
            "analysis": {"secheresse_score": 8, "rougeurs_score": 2, "eclat_score": 4, "interpretation_texte": "Peau sèche"},
            "recommended_products": [{"id": "p1", "name": "Crème hydratante karité"}],
        },
    )

    response = authenticated_client.post("/api/ai/skin-analysis", json={"image": "data:image/jpeg;base64,AAAA"})

    assert response.status_code == 200
    body = response.json()
    assert body["analysis"]["secheresse_score"] == 8
    assert body["recommendedProducts"][0]["id"] == "p1"


def test_strategic_decision_alias_route(authenticated_client, monkeypatch):
    from institut_backend.services.ai import scenarios

    monkeypatch.setattr(scenarios, "advise", lambda question, context, role: {"recommendation": "ok"})

    for path in ("/api/ai/strategic-decision", "/api/ai/strategic-decision-assistant"):
        response = authenticated_client.post(path, json={"question": "Ouvrir le dimanche ?"})
        assert response.status_code == 200
        assert response.json() == {"success": True, "data": {"recommendation": "ok"}}


def test_legacy_create_user_route(authenticated_client, monkeypatch):
    from institut_core import user_service

    def fake_create(email, password, **kwargs):
        return UserProfile(id="u9", email=email, role=kwargs["role"], pseudo=kwargs["pseudo"])

    monkeypatch.setattr(user_service, "create_user", fake_create)

    response = authenticated_client.post(
        "/api/admin/create-user",
        json={"email": "Fatou@Example.com", "password": "secret12", "pseudo": "fatou", "role": "caissiere"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["user"]["email"] == "fatou@example.com"
    assert body["user"]["role"] == "caissiere"


def test_create_user_requires_admin(as_role):
    response = as_role("manager").post("/users", json={"email": "a@b.c", "password": "secret12"})
    assert response.status_code == 403


def test_token_with_bad_credentials(client, monkeypatch):
    monkeypatch.setattr("institut_backend.api.auth.authenticate_user", lambda identifier, password: None)

    response = client.post("/auth/token", data={"username": "awa", "password": "nope"})
    assert response.status_code == 401


def test_token_issued_for_valid_user(client, monkeypatch):
    profile = UserProfile(id="u1", email="awa@example.com", role="manager", pseudo="awa")
    monkeypatch.setattr("institut_backend.api.auth.authenticate_user", lambda identifier, password: profile)

    response = client.post("/auth/token", data={"username": "awa", "password": "secret12"})

    assert response.status_code == 200
    body = response.json()
    assert body["access_token"]
    assert body["user"]["role"] == "manager"
    assert "appointments" in body["user"]["permissions"]


def test_sales_list_forwards_search(authenticated_client, monkeypatch):
    captured = {}

    def fake_page(**kwargs):
        captured.update(kwargs)
        return PagedResult(items=[], total=0, page=1, per_page=20)

    monkeypatch.setattr("institut_backend.services.sales.list_sales_page", fake_page)

    response = authenticated_client.get("/sales", params={"search": "orange money", "status": "paye"})

    assert response.status_code == 200
    assert captured["search"] == "orange money"
    assert captured["status"] == "paye"


def test_reactivating_sale_without_stock_is_conflict(authenticated_client, monkeypatch):
    from institut_backend.services import sales

    def short(sale_id, status):
        raise sales.InsufficientStock("Stock insuffisant pour Crème hydratante karité")

    monkeypatch.setattr(sales, "update_status", short)

    response = authenticated_client.patch("/sales/v1/status", json={"status": "paye"})
    assert response.status_code == 409


def test_delivery_invalid_transition_is_conflict(as_role, monkeypatch):
    from institut_backend.services import deliveries

    def refuse(delivery_id, statut):
        raise deliveries.InvalidDeliveryTransition("Passage de « livre » à « en_preparation » impossible.")

    monkeypatch.setattr(deliveries, "update_status", refuse)

    response = as_role("caissiere").patch("/deliveries/l1/status", json={"statut": "en_preparation"})
    assert response.status_code == 409


def test_promotion_code_format_is_validated(authenticated_client):
    response = authenticated_client.post(
        "/promotions",
        json={"name": "Soldes", "code": "x", "start_date": "2026-03-01T00:00:00", "end_date": "2026-03-31T00:00:00"},
    )
    assert response.status_code == 422


def test_caissiere_reads_but_cannot_create_promotions(as_role, monkeypatch):
    from institut_backend.services import promotions

    monkeypatch.setattr(
        promotions, "promotion_stats", lambda: {"total": 2, "active": 1, "scheduled": 0, "expired": 1}
    )
    client = as_role("caissiere")

    assert client.get("/promotions/stats").json()["active"] == 1
    response = client.post(
        "/promotions",
        json={"name": "Soldes", "code": "SOLDES", "start_date": "2026-03-01T00:00:00", "end_date": "2026-03-31T00:00:00"},
    )
    assert response.status_code == 403


def test_notifications_are_listed_for_the_caller(as_role, monkeypatch):
    from institut_backend.services import notifications

    seen = {}

    def fake_page(**kwargs):
        seen.update(kwargs)
        return PagedResult(items=[], total=0, page=1, per_page=20)

    monkeypatch.setattr(notifications, "list_notifications_page", fake_page)

    response = as_role("employee").get("/notifications", params={"status": "unread"})

    assert response.status_code == 200
    assert seen["user_id"] == "employee-1"
    assert seen["role"] == "employee"
    assert seen["status"] == "unread"


def test_archiving_someone_elses_notification_is_forbidden(as_role, monkeypatch):
    from institut_backend.services import notifications

    def refuse(notification_id, *, user_id, role):
        raise notifications.NotificationForbidden("Cette notification ne vous est pas destinée.")

    monkeypatch.setattr(notifications, "archive", refuse)

    assert as_role("employee").patch("/notifications/n1/archive").status_code == 403


def test_worker_activity_requires_admin(as_role):
    response = as_role("manager").post("/workers/t1/activity", json={"montant_recu": 5000})
    assert response.status_code == 403


def test_worker_activity_needs_content(authenticated_client):
    response = authenticated_client.post("/workers/t1/activity", json={})
    assert response.status_code == 422
