"""Stock endpoints: réceptions, lignes reçues et alertes de stock bas."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from institut_backend.dependencies.paging import PageParams, page_params
from institut_backend.dependencies.security import AuthenticatedUser, require_resource
from institut_backend.schemas.stock import (
    LowStockResponse,
    StockCreate,
    StockDetail,
    StockItemOut,
    StockItemsRequest,
    StockOut,
    StockPage,
    StockUpdate,
)
from institut_backend.services import stock as stock_service

router = APIRouter(prefix="/stock", tags=["stock"])

_access = require_resource("stock")


@router.get("/low", response_model=LowStockResponse)
def get_low_stock(
    threshold: int = Query(stock_service.LOW_STOCK_THRESHOLD, ge=0),
    limit: Optional[int] = Query(default=None, ge=1, le=500),
    user: AuthenticatedUser = Depends(_access),
):
    df = stock_service.fetch_low_stock(threshold=threshold, limit=limit)
    return LowStockResponse(threshold=threshold, items=df.to_dict(orient="records"))


@router.get("", response_model=StockPage)
def list_stocks(
    search: Optional[str] = Query(default=None),
    status_filter: Optional[str] = Query(default=None, alias="status"),
    is_active: Optional[bool] = Query(default=None),
    paging: PageParams = Depends(page_params),
    user: AuthenticatedUser = Depends(_access),
):
    result = stock_service.list_stocks_page(
        search=search,
        status=status_filter,
        is_active=is_active,
        page=paging.page,
        per_page=paging.per_page,
    )
    return StockPage(items=result.items, meta=result.meta())


@router.get("/{stock_id}", response_model=StockDetail)
def get_stock(stock_id: str, user: AuthenticatedUser = Depends(_access)):
    return stock_service.get_stock(stock_id)


@router.post("", response_model=StockDetail, status_code=status.HTTP_201_CREATED)
def create_stock(payload: StockCreate, user: AuthenticatedUser = Depends(_access)):
    items = [line.model_dump() for line in payload.items]
    try:
        return stock_service.create_stock(payload.model_dump(exclude={"items"}), items, created_by=user.id)
    except stock_service.StockProductNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.post("/{stock_id}/items", response_model=List[StockItemOut], status_code=status.HTTP_201_CREATED)
def add_stock_items(stock_id: str, payload: StockItemsRequest, user: AuthenticatedUser = Depends(_access)):
    try:
        return stock_service.add_items(stock_id, [line.model_dump() for line in payload.items], created_by=user.id)
    except stock_service.StockProductNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_stock_item(item_id: str, user: AuthenticatedUser = Depends(_access)) -> Response:
    stock_service.remove_item(item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{stock_id}", response_model=StockOut)
def update_stock(stock_id: str, payload: StockUpdate, user: AuthenticatedUser = Depends(_access)):
    return stock_service.update_stock(stock_id, payload.model_dump(exclude_unset=True))


@router.delete("/{stock_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_stock(stock_id: str, user: AuthenticatedUser = Depends(_access)) -> Response:
    stock_service.delete_stock(stock_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
