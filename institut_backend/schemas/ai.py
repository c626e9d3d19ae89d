"""Request bodies of the ``/api/ai`` routes (camelCase keys, as sent by the dashboard)."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AIRequestBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_role: Optional[str] = Field(default=None, alias="userRole")


class BusinessQueryRequest(AIRequestBase):
    query: Optional[str] = None


class SmartAlertsRequest(AIRequestBase):
    pass


class PredictionRequest(AIRequestBase):
    period: Optional[str] = None


class ComparisonRequest(AIRequestBase):
    comparison_type: str = Field(default="period", alias="comparisonType")
    period1: Optional[Dict[str, str]] = None
    period2: Optional[Dict[str, str]] = None


class WhatIfRequest(AIRequestBase):
    scenario: Optional[str] = None
    parameters: Dict[str, Any] = Field(default_factory=dict)


class StrategicDecisionRequest(AIRequestBase):
    question: Optional[str] = None
    context: Optional[str] = None


class ClientProfileRequest(AIRequestBase):
    client_id: Optional[str] = Field(default=None, alias="clientId")


class ProductRecommendationRequest(AIRequestBase):
    query: Optional[str] = None


class ProductDataRequest(AIRequestBase):
    product_data: Optional[Dict[str, Any]] = Field(default=None, alias="productData")


class ProductImageRequest(AIRequestBase):
    image_base64: Optional[Any] = Field(default=None, alias="imageBase64")


class SkinAnalysisRequest(AIRequestBase):
    image: Optional[str] = None


class GeminiProxyRequest(AIRequestBase):
    prompt: Optional[str] = None
    image: Optional[str] = None
    mode: str = "text"


class BusinessQueryResponse(BaseModel):
    response: str


class AIEnvelope(BaseModel):
    success: bool = True
    data: Dict[str, Any]


class ProductRecommendationResponse(BaseModel):
    response: str
    product: Optional[Dict[str, Any]] = None


class DuplicateCheckResponse(BaseModel):
    duplicates: List[Dict[str, Any]]
    has_duplicates: bool = Field(serialization_alias="hasDuplicates")
    message: str


class SkinScores(BaseModel):
    secheresse_score: float
    rougeurs_score: float
    eclat_score: float
    interpretation_texte: str = ""


class SkinAnalysisResponse(BaseModel):
    analysis: SkinScores
    recommended_products: List[Dict[str, Any]] = Field(serialization_alias="recommendedProducts")


class GeminiProxyResponse(BaseModel):
    text: str
