"""Gift card endpoints (``dd-cartes-cadeaux`` and their transactions)."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from institut_backend.dependencies.paging import PageParams, page_params
from institut_backend.dependencies.security import AuthenticatedUser, require_resource
from institut_backend.schemas.gift_cards import (
    GiftCardCreate,
    GiftCardDetail,
    GiftCardOut,
    GiftCardPage,
    GiftCardRedeem,
    GiftCardUpdate,
)
from institut_backend.services import gift_cards as gift_card_service

router = APIRouter(prefix="/gift-cards", tags=["gift-cards"])

_access = require_resource("sales", write_min_role="caissiere")


@router.get("", response_model=GiftCardPage)
def list_gift_cards(
    status_filter: Optional[str] = Query(default=None, alias="status"),
    client_id: Optional[str] = Query(default=None),
    search: Optional[str] = Query(default=None, description="Code de la carte"),
    paging: PageParams = Depends(page_params),
    user: AuthenticatedUser = Depends(_access),
):
    result = gift_card_service.list_gift_cards_page(
        status=status_filter,
        client_id=client_id,
        search=search,
        page=paging.page,
        per_page=paging.per_page,
    )
    return GiftCardPage(items=result.items, meta=result.meta())


@router.get("/{card_id}", response_model=GiftCardDetail)
def get_gift_card(card_id: str, user: AuthenticatedUser = Depends(_access)):
    try:
        return gift_card_service.get_gift_card(card_id)
    except gift_card_service.GiftCardNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.post("", response_model=GiftCardOut, status_code=status.HTTP_201_CREATED)
def create_gift_card(payload: GiftCardCreate, user: AuthenticatedUser = Depends(_access)):
    try:
        return gift_card_service.create_gift_card(payload.model_dump(), created_by=user.id)
    except gift_card_service.GiftCardConflict as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


@router.post("/{card_id}/redeem", response_model=GiftCardDetail)
def redeem_gift_card(card_id: str, payload: GiftCardRedeem, user: AuthenticatedUser = Depends(_access)):
    try:
        return gift_card_service.redeem(card_id, payload.amount, created_by=user.id, notes=payload.notes)
    except gift_card_service.GiftCardNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except (gift_card_service.GiftCardUnavailable, ValueError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.put("/{card_id}", response_model=GiftCardOut)
def update_gift_card(card_id: str, payload: GiftCardUpdate, user: AuthenticatedUser = Depends(_access)):
    try:
        return gift_card_service.update_gift_card(card_id, payload.model_dump(exclude_unset=True))
    except gift_card_service.GiftCardNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.delete("/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_gift_card(card_id: str, user: AuthenticatedUser = Depends(_access)) -> Response:
    try:
        gift_card_service.delete_gift_card(card_id)
    except gift_card_service.GiftCardNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
