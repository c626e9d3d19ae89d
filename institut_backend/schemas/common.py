from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, field_validator


class PagingMeta(BaseModel):
    page: int
    per_page: int
    total: int
    total_pages: int


class DeleteResult(BaseModel):
    deleted: bool
    soft_deleted: bool = False
    message: Optional[str] = None


def strip_or_none(value: object) -> Optional[str]:
    if value is None:
        return None
    cleaned = str(value).strip()
    return cleaned or None


class StrippedModel(BaseModel):
    """Nettoie les chaînes (espaces, chaînes vides -> None) avant validation."""

    @field_validator("*", mode="before")
    @classmethod
    def _strip_strings(cls, value):
        if isinstance(value, str):
            return strip_or_none(value)
        return value


__all__ = ["DeleteResult", "PagingMeta", "StrippedModel", "strip_or_none"]
