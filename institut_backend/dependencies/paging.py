"""Paramètres de pagination communs aux listes (``page`` / ``per_page``)."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from fastapi import Query

from institut_backend.settings import Settings
from institut_core.repositories.base import MAX_PER_PAGE


@lru_cache
def _default_page_size() -> int:
    return Settings.load().page_size


@dataclass(frozen=True)
class PageParams:
    page: int
    per_page: int


def page_params(
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(default=None, ge=1, le=MAX_PER_PAGE),
) -> PageParams:
    return PageParams(page=page, per_page=per_page or min(_default_page_size(), MAX_PER_PAGE))
