"""FastAPI application exposing the institute back office and its AI assistants."""

from __future__ import annotations

import logging
import os
from functools import lru_cache

from fastapi import APIRouter, Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from institut_backend.api import ai as ai_router
from institut_backend.api import ai_settings as ai_settings_router
from institut_backend.api import appointments as appointments_router
from institut_backend.api import audit as audit_router
from institut_backend.api import auth as auth_router
from institut_backend.api import catalog as catalog_router
from institut_backend.api import clients as clients_router
from institut_backend.api import dashboard as dashboard_router
from institut_backend.api import deliveries as deliveries_router
from institut_backend.api import finance as finance_router
from institut_backend.api import gift_cards as gift_cards_router
from institut_backend.api import loyalty as loyalty_router
from institut_backend.api import notifications as notifications_router
from institut_backend.api import prestations as prestations_router
from institut_backend.api import promotions as promotions_router
from institut_backend.api import sales as sales_router
from institut_backend.api import stock as stock_router
from institut_backend.api import suppliers as suppliers_router
from institut_backend.api import users as users_router
from institut_backend.api import workers as workers_router
from institut_backend.api.errors import setup_exception_handlers
from institut_backend.dependencies.auth import optional_api_key
from institut_backend.settings import Settings


def _load_allowed_origins() -> list[str]:
    raw_origins = os.getenv("CORS_ALLOWED_ORIGINS")
    if not raw_origins:
        # Dashboard Next.js et Vite en local
        return [
            "http://localhost:3000",
            "http://localhost:5173",
        ]

    parsed: list[str] = []
    for entry in raw_origins.split(","):
        cleaned = entry.strip()
        if cleaned:
            parsed.append(cleaned)
    return parsed or ["http://localhost:3000"]


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("institut_core").setLevel(level)
    logging.getLogger("institut_backend").setLevel(level)


@lru_cache
def create_app() -> FastAPI:
    """Construit l'application FastAPI ainsi que tous les routeurs de domaine."""

    settings = Settings.load()
    _configure_logging(settings.log_level)

    app = FastAPI(
        title="Institut de beauté API",
        version="1.0.0",
        description="""
## API de gestion d'un institut de beauté

Cette API permet de gérer :
- **Clients et rendez-vous**
- **Catalogue** : produits, catégories, prestations, catalogue du site
- **Stock** : réceptions, lots, alertes de stock bas
- **Ventes et finances** : ventes, dépenses, revenus, synthèse
- **Fidélité** : cartes de fidélité, cartes cadeaux et promotions
- **Livraisons**, **notifications** et **fiches des travailleurs**
- **Assistants IA** (Gemini) : questions métier, alertes, prédictions, analyse d'images

### Authentification
OAuth2 avec JWT. Obtenez un token via `/auth/token` (email ou pseudo + mot de passe Supabase).
        """,
        openapi_tags=[
            {"name": "auth", "description": "Authentification et gestion des tokens"},
            {"name": "ai", "description": "Assistants Gemini"},
            {"name": "website", "description": "Catalogue public du site"},
        ],
        docs_url="/docs",
        redoc_url="/redoc",
    )

    allowed_origins = settings.cors_allowed_origins or _load_allowed_origins()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials="*" not in allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_exception_handlers(app)

    app.include_router(auth_router.router)
    app.include_router(catalog_router.website_router)

    # Clé API optionnelle devant toutes les routes métier (JWT vérifié route par route).
    business_router = APIRouter(dependencies=[Depends(optional_api_key)])
    for module in (
        clients_router,
        appointments_router,
        catalog_router,
        prestations_router,
        stock_router,
        sales_router,
        deliveries_router,
        promotions_router,
        finance_router,
        suppliers_router,
        loyalty_router,
        gift_cards_router,
        audit_router,
        users_router,
        workers_router,
        notifications_router,
        ai_settings_router,
        dashboard_router,
        ai_router,
    ):
        business_router.include_router(module.router)
    business_router.include_router(users_router.admin_router)
    app.include_router(business_router)

    @app.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    logging.getLogger(__name__).info("Application prête (%s)", settings.app_env)
    return app


app = create_app()
