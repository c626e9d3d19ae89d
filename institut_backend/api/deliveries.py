"""Delivery endpoints (``dd-livraisons``)."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from institut_backend.dependencies.paging import PageParams, page_params
from institut_backend.dependencies.security import AuthenticatedUser, require_resource
from institut_backend.schemas.deliveries import (
    DeliveryCreate,
    DeliveryMode,
    DeliveryOut,
    DeliveryPage,
    DeliveryStatus,
    DeliveryStatusUpdate,
    DeliveryUpdate,
)
from institut_backend.services import deliveries as delivery_service

router = APIRouter(prefix="/deliveries", tags=["deliveries"])

# Les livraisons suivent les ventes : la caissière peut les créer et les faire avancer.
_access = require_resource("sales", write_min_role="caissiere")


@router.get("", response_model=DeliveryPage)
def list_deliveries(
    statut: Optional[DeliveryStatus] = Query(default=None),
    mode: Optional[DeliveryMode] = Query(default=None),
    client_id: Optional[str] = Query(default=None),
    search: Optional[str] = Query(default=None, description="Adresse, livreur externe ou note"),
    date_from: Optional[datetime] = Query(default=None),
    date_to: Optional[datetime] = Query(default=None),
    paging: PageParams = Depends(page_params),
    user: AuthenticatedUser = Depends(_access),
):
    result = delivery_service.list_deliveries_page(
        statut=statut,
        mode=mode,
        client_id=client_id,
        search=search,
        date_from=date_from,
        date_to=date_to,
        page=paging.page,
        per_page=paging.per_page,
    )
    return DeliveryPage(items=result.items, meta=result.meta())


@router.get("/{delivery_id}", response_model=DeliveryOut)
def get_delivery(delivery_id: str, user: AuthenticatedUser = Depends(_access)):
    return delivery_service.get_delivery(delivery_id)


@router.post("", response_model=DeliveryOut, status_code=status.HTTP_201_CREATED)
def create_delivery(payload: DeliveryCreate, user: AuthenticatedUser = Depends(_access)):
    return delivery_service.create_delivery(payload.model_dump(), user_id=user.id)


@router.put("/{delivery_id}", response_model=DeliveryOut)
def update_delivery(delivery_id: str, payload: DeliveryUpdate, user: AuthenticatedUser = Depends(_access)):
    try:
        return delivery_service.update_delivery(delivery_id, payload.model_dump(exclude_unset=True))
    except delivery_service.InvalidDeliveryTransition as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


@router.patch("/{delivery_id}/status", response_model=DeliveryOut)
def update_delivery_status(
    delivery_id: str, payload: DeliveryStatusUpdate, user: AuthenticatedUser = Depends(_access)
):
    try:
        return delivery_service.update_status(delivery_id, payload.statut)
    except delivery_service.InvalidDeliveryTransition as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


@router.delete("/{delivery_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_delivery(delivery_id: str, user: AuthenticatedUser = Depends(_access)) -> Response:
    delivery_service.delete_delivery(delivery_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
