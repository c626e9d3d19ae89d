"""Assemble the SQLAlchemy URL of the Supabase Postgres database."""

from __future__ import annotations

import os
from urllib.parse import quote_plus

DRIVER_SCHEME = "postgresql+psycopg2://"
# Schémas renvoyés par le tableau de bord Supabase, refusés tels quels par SQLAlchemy 2.
_BARE_SCHEMES = ("postgres://", "postgresql://")
SUPABASE_HOST_SUFFIXES = (".supabase.co", ".supabase.com")


def _get_env(name: str) -> str | None:
    value = (os.getenv(name) or "").strip()
    return value or None


def normalize_url(url: str) -> str:
    """Force le driver psycopg2 et ``sslmode=require`` pour les hôtes Supabase."""
    for scheme in _BARE_SCHEMES:
        if url.startswith(scheme):
            url = DRIVER_SCHEME + url[len(scheme):]
            break
    host = url.split("@", 1)[-1].split("/", 1)[0].split(":", 1)[0]
    if host.endswith(SUPABASE_HOST_SUFFIXES) and "sslmode=" not in url:
        url += ("&" if "?" in url else "?") + "sslmode=require"
    return url


def get_database_url() -> str:
    """Build the connection string.

    Priority order:

    1. ``DATABASE_URL`` or ``SUPABASE_DB_URL`` (complete connection string).
    2. ``POSTGRES_*`` / ``DB_*`` parts.
    3. A local Postgres (``supabase start`` listens on 54322).
    """
    explicit_url = _get_env("DATABASE_URL") or _get_env("SUPABASE_DB_URL")
    if explicit_url:
        return normalize_url(explicit_url)

    user = _get_env("POSTGRES_USER") or "postgres"
    password = _get_env("POSTGRES_PASSWORD")
    database = _get_env("POSTGRES_DB") or _get_env("DB_NAME") or "postgres"
    host = _get_env("DB_HOST") or _get_env("POSTGRES_HOST") or "localhost"
    port = _get_env("DB_PORT") or _get_env("POSTGRES_PORT") or "54322"

    auth = quote_plus(user) if password is None else f"{quote_plus(user)}:{quote_plus(password)}"
    return normalize_url(f"{DRIVER_SCHEME}{auth}@{host}:{port}/{database}")


__all__ = ["get_database_url", "normalize_url"]
