"""Per-user AI preferences."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from institut_backend.dependencies.security import AuthenticatedUser, get_current_user
from institut_backend.schemas.ai_settings import AISettings, AISettingsOut
from institut_backend.services import ai_settings as ai_settings_service

router = APIRouter(prefix="/ai-settings", tags=["ai"])


@router.get("", response_model=AISettingsOut)
def get_ai_settings(user: AuthenticatedUser = Depends(get_current_user)):
    return ai_settings_service.get_settings(user.id)


@router.put("", response_model=AISettingsOut)
def save_ai_settings(payload: AISettings, user: AuthenticatedUser = Depends(get_current_user)):
    return ai_settings_service.save_settings(user.id, payload.model_dump())
