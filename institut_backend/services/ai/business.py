"""Assistant de questions business en langage naturel."""

from __future__ import annotations

import datetime as dt
import logging
import re
from typing import Any

from institut_core import gemini_client
from institut_core.data_repository import df_records
from institut_core.permissions import can_access

from . import data
from .common import AIRequestError, to_prompt_json

logger = logging.getLogger(__name__)

SALES_KEYWORDS = ("vendu", "vente")
PRODUCT_KEYWORDS = ("produit", "stock")
EXPENSE_KEYWORDS = ("dépensé", "dépense")
APPOINTMENT_KEYWORDS = ("rendez-vous", "rdv")
TOP_KEYWORDS = ("meilleur", "top", "best")

_CLIENT_NAME = re.compile(r"client\s+(\w+)", re.IGNORECASE)
_TIME_RANGE = re.compile(r"(\d{1,2})h.*?(\d{1,2})h")
DEFAULT_SLOT = (14, 16)


def _mentions(query: str, keywords: tuple[str, ...]) -> bool:
    return any(word in query for word in keywords)


def start_of_week(day: dt.date) -> dt.date:
    """Début de semaine au dimanche."""
    return day - dt.timedelta(days=(day.weekday() + 1) % 7)


def next_saturday(day: dt.date) -> dt.date:
    """Samedi suivant ; une semaine plus tard si ``day`` est déjà un samedi."""
    return day + dt.timedelta(days=(5 - day.weekday()) % 7 or 7)


def saturday_slot(query: str, today: dt.date) -> tuple[dt.datetime, dt.datetime]:
    start_hour, end_hour = DEFAULT_SLOT
    match = _TIME_RANGE.search(query)
    if match:
        start_hour, end_hour = int(match.group(1)), int(match.group(2))
    saturday = next_saturday(today)
    return (
        dt.datetime.combine(saturday, dt.time(start_hour % 24)),
        dt.datetime.combine(saturday, dt.time(end_hour % 24)),
    )


def build_context(query: str, role: str, now: dt.datetime | None = None) -> dict[str, Any]:
    """Collecte les données utiles à la question, dans la limite des permissions du rôle."""
    now = now or dt.datetime.now()
    today = now.date()
    midnight = dt.datetime.combine(today, dt.time())
    week_start = dt.datetime.combine(start_of_week(today), dt.time())
    lowered = query.lower()
    context: dict[str, Any] = {}

    if can_access(role, "sales") and _mentions(lowered, SALES_KEYWORDS):
        context["todaySales"] = df_records(data.paid_sales_since(midnight))
        context["weekSales"] = df_records(data.paid_sales_since(week_start))

    if can_access(role, "clients") and "client" in lowered:
        clients = df_records(data.active_clients(limit=100))
        context["clients"] = clients
        match = _CLIENT_NAME.search(query)
        if match:
            name = match.group(1).lower()
            current = next(
                (
                    client for client in clients
                    if name in (client.get("first_name") or "").lower()
                    or name in (client.get("last_name") or "").lower()
                ),
                None,
            )
            if current is not None:
                context["currentClient"] = current
                context["clientSales"] = df_records(data.paid_sales_since(week_start, client_id=str(current["id"])))

    if can_access(role, "products") and _mentions(lowered, PRODUCT_KEYWORDS):
        products = data.active_products(only_published=False, limit=200)
        columns = [col for col in ("id", "name", "stock_quantity", "price") if col in products.columns]
        context["products"] = df_records(products[columns]) if not products.empty else []

    if can_access(role, "finances") and _mentions(lowered, EXPENSE_KEYWORDS):
        context["todayExpenses"] = data.expenses_total_for_day(today)
        context["yesterdayExpenses"] = data.expenses_total_for_day(today - dt.timedelta(days=1))

    if can_access(role, "appointments") and _mentions(lowered, APPOINTMENT_KEYWORDS):
        if "samedi" in lowered or "saturday" in lowered:
            start, end = saturday_slot(lowered, today)
            context["appointments"] = df_records(data.appointments_between(start, end))

    if can_access(role, "products") and _mentions(lowered, TOP_KEYWORDS):
        context["topProducts"] = df_records(data.top_products(limit=10))

    return context


def answer(query: str, role: str, now: dt.datetime | None = None) -> str:
    if not query or not query.strip():
        raise AIRequestError("La question est obligatoire")
    context = build_context(query, role, now=now)
    logger.debug("Contexte business (%s): %s", role, sorted(context))
    prompt = f"""Tu es un assistant business pour une entreprise de cosmétiques.
L'utilisateur a le rôle: {role}
Question de l'utilisateur: "{query}"

Données disponibles dans le contexte:
{to_prompt_json(context)}

Réponds à la question en français de manière claire et concise.
Si les données ne sont pas disponibles pour cette question (par manque de permissions ou données inexistantes), explique-le poliment.
Utilise les données du contexte pour fournir des réponses précises avec des chiffres réels."""
    return gemini_client.generate_text(prompt)
