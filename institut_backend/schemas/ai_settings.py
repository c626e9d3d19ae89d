from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class AISettings(BaseModel):
    voice_navigation_enabled: bool = False
    product_recommendation_enabled: bool = True
    skin_analysis_enabled: bool = True
    business_query_enabled: bool = True
    business_query_vocal_response_enabled: bool = False


class AISettingsOut(AISettings):
    user_id: str
    id: Optional[str] = None
