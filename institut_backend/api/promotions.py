"""Promotion endpoints (``dd-promotions``)."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from institut_backend.dependencies.paging import PageParams, page_params
from institut_backend.dependencies.security import AuthenticatedUser, require_resource
from institut_backend.schemas.promotions import (
    PromotionCreate,
    PromotionOut,
    PromotionPage,
    PromotionStats,
    PromotionType,
    PromotionUpdate,
)
from institut_backend.services import promotions as promotion_service

router = APIRouter(prefix="/promotions", tags=["promotions"])

# Lecture en caisse, gestion réservée aux managers et administrateurs.
_access = require_resource("sales")


@router.get("", response_model=PromotionPage)
def list_promotions(
    search: Optional[str] = Query(default=None, description="Nom, description ou code"),
    is_active: Optional[bool] = Query(default=None),
    promotion_type: Optional[PromotionType] = Query(default=None, alias="type"),
    paging: PageParams = Depends(page_params),
    user: AuthenticatedUser = Depends(_access),
):
    result = promotion_service.list_promotions_page(
        search=search,
        is_active=is_active,
        promotion_type=promotion_type,
        page=paging.page,
        per_page=paging.per_page,
    )
    return PromotionPage(items=result.items, meta=result.meta())


@router.get("/stats", response_model=PromotionStats)
def promotion_stats(user: AuthenticatedUser = Depends(_access)):
    return promotion_service.promotion_stats()


@router.get("/{promotion_id}", response_model=PromotionOut)
def get_promotion(promotion_id: str, user: AuthenticatedUser = Depends(_access)):
    return promotion_service.get_promotion(promotion_id)


@router.post("", response_model=PromotionOut, status_code=status.HTTP_201_CREATED)
def create_promotion(payload: PromotionCreate, user: AuthenticatedUser = Depends(_access)):
    try:
        return promotion_service.create_promotion(payload.model_dump())
    except promotion_service.DuplicatePromotionCode as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


@router.put("/{promotion_id}", response_model=PromotionOut)
def update_promotion(promotion_id: str, payload: PromotionUpdate, user: AuthenticatedUser = Depends(_access)):
    try:
        return promotion_service.update_promotion(promotion_id, payload.model_dump(exclude_unset=True))
    except promotion_service.DuplicatePromotionCode as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except promotion_service.PromotionError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.delete("/{promotion_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_promotion(promotion_id: str, user: AuthenticatedUser = Depends(_access)) -> Response:
    promotion_service.delete_promotion(promotion_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
