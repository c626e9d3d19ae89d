"""Accès Supabase Auth (connexion et création de comptes via la clé service-role)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from supabase import AuthError, Client, ClientOptions, create_client

from .settings import AppSettings

logger = logging.getLogger(__name__)


class SupabaseConfigError(RuntimeError):
    """Raised when the Supabase URL / service key are not configured."""


class SupabaseAuthFailed(RuntimeError):
    """Raised when Supabase rejects credentials or an admin call."""


@dataclass(frozen=True)
class AuthIdentity:
    id: str
    email: str


def _credentials(settings: AppSettings | None = None) -> tuple[str, str]:
    settings = settings or AppSettings.load()
    if not settings.supabase_url or not settings.supabase_service_role_key:
        raise SupabaseConfigError("Configuration Supabase manquante (SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY)")
    return settings.supabase_url, settings.supabase_service_role_key


def _options() -> ClientOptions:
    return ClientOptions(
        auto_refresh_token=False,
        persist_session=False,
        postgrest_client_timeout=30,
    )


@lru_cache(maxsize=1)
def get_admin_client() -> Client:
    """Client service-role partagé (API admin uniquement, jamais de session utilisateur)."""
    url, key = _credentials()
    logger.info("Client Supabase admin initialisé")
    return create_client(url, key, options=_options())


def sign_in(email: str, password: str) -> AuthIdentity:
    """Vérifie un couple email / mot de passe auprès de Supabase Auth."""
    url, key = _credentials()
    # Client éphémère : la session ouverte ne doit pas contaminer le client admin partagé.
    client = create_client(url, key, options=_options())
    try:
        response = client.auth.sign_in_with_password({"email": email, "password": password})
    except AuthError as exc:
        logger.info("Connexion refusée pour %s: %s", email, exc)
        raise SupabaseAuthFailed("Identifiants invalides") from exc
    if response.user is None:
        raise SupabaseAuthFailed("Identifiants invalides")
    return AuthIdentity(id=str(response.user.id), email=response.user.email or email)


def create_auth_user(email: str, password: str, metadata: dict[str, Any] | None = None) -> AuthIdentity:
    try:
        response = get_admin_client().auth.admin.create_user(
            {
                "email": email,
                "password": password,
                "email_confirm": True,
                "user_metadata": metadata or {},
            }
        )
    except AuthError as exc:
        logger.warning("Création du compte %s refusée: %s", email, exc)
        raise SupabaseAuthFailed(str(exc)) from exc
    if response.user is None:
        raise SupabaseAuthFailed("Aucun utilisateur retourné par Supabase")
    return AuthIdentity(id=str(response.user.id), email=response.user.email or email)


def delete_auth_user(auth_user_id: str) -> None:
    try:
        get_admin_client().auth.admin.delete_user(auth_user_id)
    except AuthError as exc:
        logger.error("Suppression du compte auth %s impossible: %s", auth_user_id, exc)
        raise SupabaseAuthFailed(str(exc)) from exc
