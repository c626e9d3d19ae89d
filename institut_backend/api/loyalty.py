"""Loyalty card endpoints (``dd-cartes-fidelite``)."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from institut_backend.dependencies.paging import PageParams, page_params
from institut_backend.dependencies.security import AuthenticatedUser, require_resource
from institut_backend.schemas.loyalty import (
    CardStatus,
    LoyaltyCardCreate,
    LoyaltyCardOut,
    LoyaltyCardPage,
    LoyaltyCardUpdate,
    LoyaltyTier,
    LoyaltyVisit,
)
from institut_backend.services import loyalty as loyalty_service

router = APIRouter(prefix="/loyalty", tags=["loyalty"])

_access = require_resource("clients")


@router.get("", response_model=LoyaltyCardPage)
def list_cards(
    tier: Optional[LoyaltyTier] = Query(default=None),
    status_filter: Optional[CardStatus] = Query(default=None, alias="status"),
    client_id: Optional[str] = Query(default=None),
    search: Optional[str] = Query(default=None),
    paging: PageParams = Depends(page_params),
    user: AuthenticatedUser = Depends(_access),
):
    result = loyalty_service.list_cards_page(
        tier=tier,
        status=status_filter,
        client_id=client_id,
        search=search,
        page=paging.page,
        per_page=paging.per_page,
    )
    return LoyaltyCardPage(items=result.items, meta=result.meta())


@router.get("/{card_id}", response_model=LoyaltyCardOut)
def get_card(card_id: str, user: AuthenticatedUser = Depends(_access)):
    return loyalty_service.get_card(card_id)


@router.post("", response_model=LoyaltyCardOut, status_code=status.HTTP_201_CREATED)
def create_card(payload: LoyaltyCardCreate, user: AuthenticatedUser = Depends(_access)):
    return loyalty_service.create_card(payload.model_dump())


@router.post("/{card_id}/visit", response_model=LoyaltyCardOut)
def record_visit(card_id: str, payload: LoyaltyVisit, user: AuthenticatedUser = Depends(_access)):
    try:
        return loyalty_service.record_visit(card_id, payload.amount)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.put("/{card_id}", response_model=LoyaltyCardOut)
def update_card(card_id: str, payload: LoyaltyCardUpdate, user: AuthenticatedUser = Depends(_access)):
    return loyalty_service.update_card(card_id, payload.model_dump(exclude_unset=True))


@router.delete("/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_card(card_id: str, user: AuthenticatedUser = Depends(_access)) -> Response:
    loyalty_service.delete_card(card_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
