"""Assistants IA (Gemini) alimentés par les données de l'institut."""

from .common import AIRequestError, AIResourceNotFound, AIResponseError

__all__ = ["AIRequestError", "AIResourceNotFound", "AIResponseError"]
