"""
Google Gemini client.

Text and multimodal completions via ``client.models.generate_content()``
(model ``gemini-2.5-flash`` by default). Replies are free text; the JSON
helpers below pull the first ``{...}`` object out of a reply that may be
wrapped in markdown fences or prose.
"""

from __future__ import annotations

import json
import logging
import re
from functools import lru_cache
from typing import Any

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from .settings import AppSettings

logger = logging.getLogger(__name__)

_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class GeminiNotConfigured(RuntimeError):
    """GEMINI_API_KEY is missing."""


class GeminiError(RuntimeError):
    """The Gemini API call failed or returned nothing usable."""


@lru_cache(maxsize=1)
def get_client() -> genai.Client:
    settings = AppSettings.load()
    if not settings.gemini_api_key:
        raise GeminiNotConfigured("GEMINI_API_KEY non configurée")
    return genai.Client(api_key=settings.gemini_api_key)


def _model_name(model: str | None) -> str:
    return model or AppSettings.load().gemini_model


def _generate(contents: list[Any], *, model: str | None, temperature: float | None) -> str:
    config = types.GenerateContentConfig(temperature=temperature) if temperature is not None else None
    name = _model_name(model)
    try:
        response = get_client().models.generate_content(model=name, contents=contents, config=config)
    except genai_errors.APIError as exc:
        logger.error("Appel Gemini (%s) en échec: %s", name, exc)
        raise GeminiError(f"Erreur Gemini: {exc}") from exc
    text = response.text or ""
    if not text.strip():
        raise GeminiError("Réponse Gemini vide")
    return text


def generate_text(prompt: str, *, model: str | None = None, temperature: float | None = None) -> str:
    return _generate([prompt], model=model, temperature=temperature)


def generate_with_image(
    prompt: str,
    image: bytes,
    mime_type: str = "image/jpeg",
    *,
    model: str | None = None,
    temperature: float | None = None,
) -> str:
    part = types.Part.from_bytes(data=image, mime_type=mime_type)
    return _generate([prompt, part], model=model, temperature=temperature)


def extract_json(text: str) -> dict[str, Any] | None:
    """Retourne le premier objet JSON trouvé dans ``text`` ou None."""
    if not text:
        return None
    cleaned = _FENCE.sub("", text).strip()
    match = _JSON_OBJECT.search(cleaned)
    if not match:
        return None
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError:
        logger.warning("Réponse Gemini non JSON: %.200s", text)
        return None
    return parsed if isinstance(parsed, dict) else None


def generate_json(prompt: str, fallback: dict[str, Any], **kwargs: Any) -> tuple[dict[str, Any], bool]:
    """Génère puis parse ; renvoie (données, True) ou (fallback, False) si le JSON est illisible."""
    parsed = extract_json(generate_text(prompt, **kwargs))
    if parsed is None:
        return fallback, False
    return parsed, True
