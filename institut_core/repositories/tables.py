"""Column catalogue of the ``dd-*`` tables of the Supabase schema."""

from __future__ import annotations

from .base import TableSpec

CLIENTS = TableSpec(
    table="dd-clients",
    columns=(
        "first_name", "last_name", "email", "phone", "gender", "date_of_birth", "address", "city",
        "postal_code", "country", "preferred_contact_method", "marketing_consent", "notes",
        "skin_type", "allergies", "total_spent", "is_active",
    ),
    search_columns=("first_name", "last_name", "email", "phone"),
)

APPOINTMENTS = TableSpec(
    table="dd-rdv",
    columns=("client_id", "service_id", "employe_id", "date_rdv", "duree", "statut", "note", "created_by"),
    search_columns=("note",),
    order_by="date_rdv DESC",
    date_column="date_rdv",
)

CATEGORIES = TableSpec(
    table="dd-categories",
    columns=("name", "description", "type", "parent_id", "is_active", "created_by"),
    search_columns=("name", "description"),
    order_by="name ASC",
)

PRODUCTS = TableSpec(
    table="dd-products",
    columns=(
        "name", "description", "category_id", "brand", "price", "cost", "stock_quantity", "sku",
        "barcode", "status", "show_to_website", "images", "is_active", "created_by",
    ),
    search_columns=("name", "brand", "sku", "barcode"),
)

SERVICES = TableSpec(
    table="dd-services",
    columns=(
        "name", "description", "category_id", "price", "duration_minutes", "tags", "images",
        "is_active", "created_by",
    ),
    search_columns=("name", "description"),
    order_by="name ASC",
)

STOCKS = TableSpec(
    table="dd-stocks",
    columns=("name", "description", "stock_ref", "status", "is_active", "created_by"),
    search_columns=("name", "stock_ref"),
)

STOCK_ITEMS = TableSpec(
    table="dd-stock-items",
    columns=(
        "stock_id", "product_id", "quantity", "batch_code", "cost_per_unit", "total_cost",
        "expiry_date", "notes", "is_active", "created_by",
    ),
    search_columns=("batch_code",),
)

SALES = TableSpec(
    table="dd-ventes",
    columns=(
        "client_id", "user_id", "date", "type", "total_brut", "reduction", "total_net",
        "methode_paiement", "status",
    ),
    search_columns=("id", "client_id", "methode_paiement", "status", "type"),
    order_by="date DESC",
    date_column="date",
)

SALE_ITEMS = TableSpec(
    table="dd-ventes-items",
    columns=("vente_id", "product_id", "service_id", "quantite", "prix_unitaire"),
    order_by="created_at ASC",
)

EXPENSES = TableSpec(
    table="dd-depenses",
    columns=("categorie", "montant", "date", "fournisseur_id", "note", "enregistre_par"),
    search_columns=("categorie", "note"),
    order_by="date DESC",
    date_column="date",
)

REVENUES = TableSpec(
    table="dd-revenues",
    columns=("type", "source_id", "montant", "date", "note", "enregistre_par"),
    search_columns=("type", "note"),
    order_by="date DESC",
    date_column="date",
)

LOYALTY_CARDS = TableSpec(
    table="dd-cartes-fidelite",
    columns=(
        "client_id", "card_number", "points_balance", "tier", "status", "total_spent",
        "total_visits", "last_visit",
    ),
    search_columns=("card_number",),
)

GIFT_CARDS = TableSpec(
    table="dd-gift-cards",
    columns=(
        "code", "initial_amount", "current_balance", "client_id", "purchased_by", "expiry_date",
        "status", "notes", "created_by",
    ),
    search_columns=("code", "notes"),
)

GIFT_CARD_TRANSACTIONS = TableSpec(
    table="dd-gift-card-transactions",
    columns=(
        "gift_card_id", "amount", "balance_before", "balance_after", "transaction_type", "notes",
        "created_by",
    ),
)

SUPPLIERS = TableSpec(
    table="dd-fournisseurs",
    columns=(
        "name", "contact_person", "email", "phone", "address", "city", "country", "payment_terms",
        "delivery_time", "rating", "is_active", "notes",
    ),
    search_columns=("name", "contact_person", "email", "city"),
    order_by="name ASC",
)

ACTIONS = TableSpec(
    table="dd-actions",
    columns=("user_id", "type", "cible_table", "cible_id", "description", "ip_address", "user_agent", "date"),
    search_columns=("description",),
    order_by="date DESC",
    date_column="date",
    readonly_columns=("id",),
)

USERS = TableSpec(
    table="dd-users",
    columns=(
        "auth_user_id", "email", "pseudo", "first_name", "last_name", "phone", "role", "salary",
        "hire_date", "created_by", "is_active",
    ),
    search_columns=("email", "pseudo", "first_name", "last_name"),
)

AI_SETTINGS = TableSpec(
    table="dd-ai-settings",
    columns=(
        "user_id", "voice_navigation_enabled", "product_recommendation_enabled",
        "skin_analysis_enabled", "business_query_enabled", "business_query_vocal_response_enabled",
    ),
)

DELIVERIES = TableSpec(
    table="dd-livraisons",
    columns=(
        "vente_id", "client_id", "adresse", "livreur_id", "livreur_name", "statut", "date_livraison",
        "frais", "mode", "preuve_photo", "note", "created_by",
    ),
    search_columns=("adresse", "livreur_name", "note"),
    date_column="created_at",
)

PROMOTIONS = TableSpec(
    table="dd-promotions",
    columns=(
        "name", "description", "code", "type", "value", "min_purchase_amount", "max_discount_amount",
        "start_date", "end_date", "is_active", "applicable_to", "applicable_items", "customer_segments",
        "usage_limit", "usage_count", "is_unique_usage", "conditions",
    ),
    search_columns=("name", "description", "code"),
)

NOTIFICATIONS = TableSpec(
    table="dd-notifications",
    columns=(
        "title", "message", "type", "priority", "status", "target_user_id", "target_role",
        "related_entity_type", "related_entity_id", "metadata", "read_at", "created_by",
    ),
    search_columns=("title", "message"),
)

WORKERS = TableSpec(
    table="dd-travailleurs",
    columns=(
        "first_name", "last_name", "phone", "email", "specialite", "competence", "taux_horaire",
        "commission_rate", "is_active", "date_embauche", "notes", "rating_global", "total_services",
        "total_montants_recus", "jours_travailles", "heures_travailles", "salaire", "salary_history",
        "payments_history", "work_history", "notes_history",
    ),
    search_columns=("first_name", "last_name", "phone", "email", "specialite"),
    order_by="last_name ASC, first_name ASC",
)
