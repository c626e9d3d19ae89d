"""Gemini-backed assistant endpoints (``/api/ai``)."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import APIRouter, Depends, HTTPException, status

from institut_backend.dependencies.security import AuthenticatedUser, get_current_user
from institut_backend.middleware.rate_limiter import ai_rate_limit
from institut_backend.schemas.ai import (
    AIEnvelope,
    AIRequestBase,
    BusinessQueryRequest,
    BusinessQueryResponse,
    ClientProfileRequest,
    ComparisonRequest,
    DuplicateCheckResponse,
    GeminiProxyRequest,
    GeminiProxyResponse,
    PredictionRequest,
    ProductDataRequest,
    ProductImageRequest,
    ProductRecommendationRequest,
    ProductRecommendationResponse,
    SkinAnalysisRequest,
    SkinAnalysisResponse,
    SmartAlertsRequest,
    StrategicDecisionRequest,
    WhatIfRequest,
)
from institut_backend.services.ai import alerts, business, clients, performance, products, proxy, scenarios, skin
from institut_backend.services.ai.common import AIRequestError, AIResourceNotFound, AIResponseError
from institut_core.gemini_client import GeminiError, GeminiNotConfigured
from institut_core.permissions import effective_role

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["ai"], dependencies=[Depends(ai_rate_limit)])


@contextmanager
def _ai_errors(route: str) -> Iterator[None]:
    """Traduit les erreurs des services IA en réponses HTTP."""
    try:
        yield
    except GeminiNotConfigured as exc:
        logger.error("%s : %s", route, exc)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    except GeminiError as exc:
        logger.error("%s : appel Gemini en échec (%s)", route, exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    except PermissionError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except AIResourceNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except AIResponseError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    except (AIRequestError, ValueError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


def _role(payload: AIRequestBase, user: AuthenticatedUser) -> str:
    return effective_role(payload.user_role, user.role)


@router.post("/business-query", response_model=BusinessQueryResponse)
def business_query(payload: BusinessQueryRequest, user: AuthenticatedUser = Depends(get_current_user)):
    with _ai_errors("business-query"):
        return BusinessQueryResponse(response=business.answer(payload.query or "", _role(payload, user)))


@router.post("/smart-alerts", response_model=AIEnvelope)
def smart_alerts(payload: SmartAlertsRequest, user: AuthenticatedUser = Depends(get_current_user)):
    with _ai_errors("smart-alerts"):
        return AIEnvelope(data=alerts.smart_alerts(_role(payload, user)))


@router.post("/performance-prediction", response_model=AIEnvelope)
def performance_prediction(payload: PredictionRequest, user: AuthenticatedUser = Depends(get_current_user)):
    with _ai_errors("performance-prediction"):
        return AIEnvelope(data=performance.predict(payload.period, _role(payload, user)))


@router.post("/performance-comparison", response_model=AIEnvelope)
def performance_comparison(payload: ComparisonRequest, user: AuthenticatedUser = Depends(get_current_user)):
    with _ai_errors("performance-comparison"):
        result = performance.compare(payload.comparison_type, payload.period1, payload.period2, _role(payload, user))
        return AIEnvelope(data=result)


@router.post("/what-if-scenarios", response_model=AIEnvelope)
def what_if_scenarios(payload: WhatIfRequest, user: AuthenticatedUser = Depends(get_current_user)):
    with _ai_errors("what-if-scenarios"):
        result = scenarios.simulate(payload.scenario or "", payload.parameters, _role(payload, user))
        return AIEnvelope(data=result)


@router.post("/strategic-decision", response_model=AIEnvelope)
@router.post("/strategic-decision-assistant", response_model=AIEnvelope, include_in_schema=False)
def strategic_decision(payload: StrategicDecisionRequest, user: AuthenticatedUser = Depends(get_current_user)):
    with _ai_errors("strategic-decision"):
        result = scenarios.advise(payload.question or "", payload.context, _role(payload, user))
        return AIEnvelope(data=result)


@router.post("/client-profile-analysis", response_model=AIEnvelope)
def client_profile_analysis(payload: ClientProfileRequest, user: AuthenticatedUser = Depends(get_current_user)):
    with _ai_errors("client-profile-analysis"):
        return AIEnvelope(data=clients.analyse(payload.client_id))


@router.post("/product-recommendation", response_model=ProductRecommendationResponse)
def product_recommendation(
    payload: ProductRecommendationRequest,
    user: AuthenticatedUser = Depends(get_current_user),
):
    with _ai_errors("product-recommendation"):
        return ProductRecommendationResponse(**products.recommend(payload.query))


@router.post("/product-duplicate-check", response_model=DuplicateCheckResponse)
def product_duplicate_check(payload: ProductDataRequest, user: AuthenticatedUser = Depends(get_current_user)):
    with _ai_errors("product-duplicate-check"):
        return DuplicateCheckResponse(**products.check_duplicates(payload.product_data))


@router.post("/price-recommendation", response_model=AIEnvelope)
def price_recommendation(payload: ProductDataRequest, user: AuthenticatedUser = Depends(get_current_user)):
    with _ai_errors("price-recommendation"):
        return AIEnvelope(data=products.recommend_price(payload.product_data))


@router.post("/product-image-analysis", response_model=AIEnvelope)
def product_image_analysis(payload: ProductImageRequest, user: AuthenticatedUser = Depends(get_current_user)):
    with _ai_errors("product-image-analysis"):
        return AIEnvelope(data=products.analyse_image(payload.image_base64))


@router.post("/skin-analysis", response_model=SkinAnalysisResponse)
def skin_analysis(payload: SkinAnalysisRequest, user: AuthenticatedUser = Depends(get_current_user)):
    with _ai_errors("skin-analysis"):
        return SkinAnalysisResponse(**skin.analyse(payload.image))


@router.post("/gemini", response_model=GeminiProxyResponse)
def gemini(payload: GeminiProxyRequest, user: AuthenticatedUser = Depends(get_current_user)):
    with _ai_errors("gemini"):
        return GeminiProxyResponse(**proxy.generate(payload.prompt, payload.image, payload.mode))
