"""Configuration centralisée (backend core) avec validation minimale."""

from __future__ import annotations

import os
from dataclasses import dataclass


def _bool_env(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return int(raw)


def _first_env(*names: str) -> str:
    for name in names:
        value = os.getenv(name)
        if value and value.strip():
            return value.strip()
    return ""


@dataclass(frozen=True)
class AppSettings:
    app_env: str = "development"
    database_url: str = ""
    db_pool_size: int = 10
    db_pool_max_overflow: int = 20
    cors_allowed_origins: list[str] = None
    jwt_secret_keys: list[str] = None
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    page_size: int = 20
    ai_rate_limit_per_minute: int = 20
    trust_proxy_headers: bool = False
    skip_supabase: bool = False

    @property
    def is_production(self) -> bool:
        return self.app_env in {"prod", "production", "staging"}

    @staticmethod
    def load() -> "AppSettings":
        cors_raw = os.getenv("CORS_ALLOWED_ORIGINS")
        cors = [entry.strip() for entry in cors_raw.split(",") if entry.strip()] if cors_raw else []
        jwt_raw = os.getenv("JWT_SECRET_KEYS") or os.getenv("JWT_SECRET_KEY") or ""
        jwt_keys = [entry.strip() for entry in jwt_raw.split(",") if entry.strip()]
        return AppSettings(
            app_env=(os.getenv("APP_ENV") or os.getenv("ENV") or "development").lower(),
            database_url=os.getenv("DATABASE_URL", ""),
            db_pool_size=_int_env("DB_POOL_SIZE", 10),
            db_pool_max_overflow=_int_env("DB_POOL_MAX_OVERFLOW", 20),
            cors_allowed_origins=cors,
            jwt_secret_keys=jwt_keys,
            supabase_url=_first_env("SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL"),
            supabase_service_role_key=_first_env("SUPABASE_SERVICE_ROLE_KEY"),
            gemini_api_key=_first_env("GEMINI_API_KEY"),
            gemini_model=_first_env("GEMINI_MODEL") or "gemini-2.5-flash",
            page_size=max(1, _int_env("PAGE_SIZE", 20)),
            ai_rate_limit_per_minute=max(1, _int_env("AI_RATE_LIMIT_PER_MINUTE", 20)),
            trust_proxy_headers=_bool_env("TRUST_PROXY_HEADERS"),
            skip_supabase=_bool_env("SKIP_SUPABASE"),
        )
