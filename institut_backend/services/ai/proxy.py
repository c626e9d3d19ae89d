"""Passe-plat vers Gemini pour les écrans qui composent leur propre prompt."""

from __future__ import annotations

from typing import Any

from institut_core import gemini_client
from institut_core.image_utils import ImageDecodeError, decode_data_url

from .common import AIRequestError

MULTIMODAL = "multimodal"


def generate(prompt: str | None, image: str | None = None, mode: str = "text") -> dict[str, Any]:
    if not prompt or not prompt.strip():
        raise AIRequestError("Le prompt est obligatoire")
    if image and mode == MULTIMODAL:
        try:
            payload = decode_data_url(image)
        except ImageDecodeError as exc:
            raise AIRequestError(str(exc)) from exc
        # Le front envoie toujours du JPEG compressé.
        return {"text": gemini_client.generate_with_image(prompt, payload.data, "image/jpeg")}
    return {"text": gemini_client.generate_text(prompt)}
