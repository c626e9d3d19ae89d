"""Helpers shared by the Gemini-backed business routes."""

from __future__ import annotations

import json
from typing import Any

from institut_core.permissions import is_admin_role


class AIRequestError(ValueError):
    """Requête IA incomplète ou invalide (400)."""


class AIResourceNotFound(LookupError):
    """Entité demandée absente (404)."""


class AIResponseError(RuntimeError):
    """Réponse du modèle inexploitable là où aucun repli n'est prévu (500)."""


def require_admin(role: str | None) -> None:
    if not is_admin_role(role):
        raise PermissionError("Accès réservé aux administrateurs")


def pct_change(current: float, base: float) -> float:
    """Variation en pourcentage ; 0 quand la base est nulle ou négative."""
    if base <= 0:
        return 0.0
    return (current - base) / base * 100


def signed(value: float, digits: int = 0) -> str:
    prefix = "+" if value > 0 else ""
    return f"{prefix}{value:.{digits}f}"


def to_prompt_json(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, indent=2, default=str)
