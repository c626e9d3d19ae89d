"""Sales endpoints (``dd-ventes`` and their lines)."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from institut_backend.dependencies.paging import PageParams, page_params
from institut_backend.dependencies.security import AuthenticatedUser, require_resource
from institut_backend.schemas.sales import (
    SaleCreate,
    SaleDetail,
    SaleOut,
    SalePage,
    SaleStatus,
    SaleStatusUpdate,
    SaleType,
)
from institut_backend.services import sales as sales_service

router = APIRouter(prefix="/sales", tags=["sales"])

# Les caissières encaissent : écriture ouverte dès ce rôle.
_access = require_resource("sales", write_min_role="caissiere")


@router.get("", response_model=SalePage)
def list_sales(
    search: Optional[str] = Query(default=None, description="Identifiant, client, paiement, statut ou type"),
    status_filter: Optional[SaleStatus] = Query(default=None, alias="status"),
    sale_type: Optional[SaleType] = Query(default=None, alias="type"),
    client_id: Optional[str] = Query(default=None),
    date_from: Optional[datetime] = Query(default=None),
    date_to: Optional[datetime] = Query(default=None),
    paging: PageParams = Depends(page_params),
    user: AuthenticatedUser = Depends(_access),
):
    result = sales_service.list_sales_page(
        search=search,
        status=status_filter,
        sale_type=sale_type,
        client_id=client_id,
        date_from=date_from,
        date_to=date_to,
        page=paging.page,
        per_page=paging.per_page,
    )
    return SalePage(items=result.items, meta=result.meta())


@router.get("/{sale_id}", response_model=SaleDetail)
def get_sale(sale_id: str, user: AuthenticatedUser = Depends(_access)):
    try:
        return sales_service.get_sale(sale_id)
    except sales_service.SaleNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.post("", response_model=SaleDetail, status_code=status.HTTP_201_CREATED)
def create_sale(payload: SaleCreate, user: AuthenticatedUser = Depends(_access)):
    items = [line.model_dump() for line in payload.items]
    try:
        return sales_service.create_sale(payload.model_dump(exclude={"items"}), items, user_id=user.id)
    except sales_service.InsufficientStock as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except sales_service.SaleServiceError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.patch("/{sale_id}/status", response_model=SaleOut)
def update_sale_status(sale_id: str, payload: SaleStatusUpdate, user: AuthenticatedUser = Depends(_access)):
    try:
        return sales_service.update_status(sale_id, payload.status)
    except sales_service.SaleNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except sales_service.InsufficientStock as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except sales_service.SaleServiceError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.delete("/{sale_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_sale(sale_id: str, user: AuthenticatedUser = Depends(_access)) -> Response:
    try:
        sales_service.delete_sale(sale_id)
    except sales_service.SaleNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
