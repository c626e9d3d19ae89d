"""Prestations (services de l'institut) endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from institut_backend.dependencies.paging import PageParams, page_params
from institut_backend.dependencies.security import AuthenticatedUser, require_resource
from institut_backend.schemas.prestations import ServiceCreate, ServiceOut, ServicePage, ServiceUpdate
from institut_backend.services import prestations as prestation_service

router = APIRouter(prefix="/services", tags=["services"])

_access = require_resource("products")


@router.get("", response_model=ServicePage)
def list_services(
    search: Optional[str] = Query(default=None),
    category_id: Optional[str] = Query(default=None),
    is_active: Optional[bool] = Query(default=None),
    paging: PageParams = Depends(page_params),
    user: AuthenticatedUser = Depends(_access),
):
    result = prestation_service.list_services_page(
        search=search, category_id=category_id, is_active=is_active, page=paging.page, per_page=paging.per_page
    )
    return ServicePage(items=result.items, meta=result.meta())


@router.get("/{service_id}", response_model=ServiceOut)
def get_service(service_id: str, user: AuthenticatedUser = Depends(_access)):
    return prestation_service.get_service(service_id)


@router.post("", response_model=ServiceOut, status_code=status.HTTP_201_CREATED)
def create_service(payload: ServiceCreate, user: AuthenticatedUser = Depends(_access)):
    return prestation_service.create_service(payload.model_dump(), created_by=user.id)


@router.put("/{service_id}", response_model=ServiceOut)
def update_service(service_id: str, payload: ServiceUpdate, user: AuthenticatedUser = Depends(_access)):
    return prestation_service.update_service(service_id, payload.model_dump(exclude_unset=True))


@router.delete("/{service_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_service(service_id: str, user: AuthenticatedUser = Depends(_access)) -> Response:
    prestation_service.delete_service(service_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
