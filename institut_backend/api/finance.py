"""Finance endpoints: dépenses, revenus et synthèse de période."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from institut_backend.dependencies.paging import PageParams, page_params
from institut_backend.dependencies.security import AuthenticatedUser, require_resource
from institut_backend.schemas.finance import (
    ExpenseCreate,
    ExpenseOut,
    ExpensePage,
    ExpenseUpdate,
    FinanceSummary,
    RevenueCreate,
    RevenueOut,
    RevenuePage,
    RevenueUpdate,
)
from institut_backend.services import finance as finance_service

router = APIRouter(prefix="/finance", tags=["finance"])

_access = require_resource("finances")


@router.get("/summary", response_model=FinanceSummary)
def get_summary(
    start: Optional[date] = Query(default=None),
    end: Optional[date] = Query(default=None),
    user: AuthenticatedUser = Depends(_access),
):
    try:
        return finance_service.compute_summary(start, end)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


# -- dépenses --------------------------------------------------------------


@router.get("/expenses", response_model=ExpensePage)
def list_expenses(
    categorie: Optional[str] = Query(default=None),
    date_from: Optional[date] = Query(default=None),
    date_to: Optional[date] = Query(default=None),
    search: Optional[str] = Query(default=None),
    paging: PageParams = Depends(page_params),
    user: AuthenticatedUser = Depends(_access),
):
    result = finance_service.list_expenses_page(
        categorie=categorie,
        date_from=date_from,
        date_to=date_to,
        search=search,
        page=paging.page,
        per_page=paging.per_page,
    )
    return ExpensePage(items=result.items, meta=result.meta())


@router.post("/expenses", response_model=ExpenseOut, status_code=status.HTTP_201_CREATED)
def create_expense(payload: ExpenseCreate, user: AuthenticatedUser = Depends(_access)):
    return finance_service.create_expense(payload.model_dump(), recorded_by=user.id)


@router.put("/expenses/{expense_id}", response_model=ExpenseOut)
def update_expense(expense_id: str, payload: ExpenseUpdate, user: AuthenticatedUser = Depends(_access)):
    return finance_service.update_expense(expense_id, payload.model_dump(exclude_unset=True))


@router.delete("/expenses/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_expense(expense_id: str, user: AuthenticatedUser = Depends(_access)) -> Response:
    finance_service.delete_expense(expense_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# -- revenus ---------------------------------------------------------------


@router.get("/revenues", response_model=RevenuePage)
def list_revenues(
    type: Optional[str] = Query(default=None),
    date_from: Optional[date] = Query(default=None),
    date_to: Optional[date] = Query(default=None),
    search: Optional[str] = Query(default=None),
    paging: PageParams = Depends(page_params),
    user: AuthenticatedUser = Depends(_access),
):
    result = finance_service.list_revenues_page(
        revenue_type=type,
        date_from=date_from,
        date_to=date_to,
        search=search,
        page=paging.page,
        per_page=paging.per_page,
    )
    return RevenuePage(items=result.items, meta=result.meta())


@router.post("/revenues", response_model=RevenueOut, status_code=status.HTTP_201_CREATED)
def create_revenue(payload: RevenueCreate, user: AuthenticatedUser = Depends(_access)):
    return finance_service.create_revenue(payload.model_dump(), recorded_by=user.id)


@router.put("/revenues/{revenue_id}", response_model=RevenueOut)
def update_revenue(revenue_id: str, payload: RevenueUpdate, user: AuthenticatedUser = Depends(_access)):
    return finance_service.update_revenue(revenue_id, payload.model_dump(exclude_unset=True))


@router.delete("/revenues/{revenue_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_revenue(revenue_id: str, user: AuthenticatedUser = Depends(_access)) -> Response:
    finance_service.delete_revenue(revenue_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
