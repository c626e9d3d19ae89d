"""Supplier endpoints (``dd-fournisseurs``)."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from institut_backend.dependencies.paging import PageParams, page_params
from institut_backend.dependencies.security import AuthenticatedUser, require_resource
from institut_backend.schemas.suppliers import SupplierCreate, SupplierOut, SupplierPage, SupplierUpdate
from institut_backend.services import suppliers as supplier_service

router = APIRouter(prefix="/suppliers", tags=["suppliers"])

_access = require_resource("products")


@router.get("", response_model=SupplierPage)
def list_suppliers(
    search: Optional[str] = Query(default=None, description="Nom, contact, email ou ville"),
    is_active: Optional[bool] = Query(default=None),
    paging: PageParams = Depends(page_params),
    user: AuthenticatedUser = Depends(_access),
):
    result = supplier_service.list_suppliers_page(
        search=search, is_active=is_active, page=paging.page, per_page=paging.per_page
    )
    return SupplierPage(items=result.items, meta=result.meta())


@router.get("/{supplier_id}", response_model=SupplierOut)
def get_supplier(supplier_id: str, user: AuthenticatedUser = Depends(_access)):
    return supplier_service.get_supplier(supplier_id)


@router.post("", response_model=SupplierOut, status_code=status.HTTP_201_CREATED)
def create_supplier(payload: SupplierCreate, user: AuthenticatedUser = Depends(_access)):
    return supplier_service.create_supplier(payload.model_dump())


@router.put("/{supplier_id}", response_model=SupplierOut)
def update_supplier(supplier_id: str, payload: SupplierUpdate, user: AuthenticatedUser = Depends(_access)):
    return supplier_service.update_supplier(supplier_id, payload.model_dump(exclude_unset=True))


@router.delete("/{supplier_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_supplier(supplier_id: str, user: AuthenticatedUser = Depends(_access)) -> Response:
    supplier_service.delete_supplier(supplier_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
