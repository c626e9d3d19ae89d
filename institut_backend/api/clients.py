"""Client endpoints (table ``dd-clients``)."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from institut_backend.dependencies.paging import PageParams, page_params
from institut_backend.dependencies.security import AuthenticatedUser, require_resource
from institut_backend.schemas.clients import ClientCreate, ClientHistory, ClientOut, ClientPage, ClientUpdate
from institut_backend.services import clients as client_service

router = APIRouter(prefix="/clients", tags=["clients"])

_access = require_resource("clients")


@router.get("", response_model=ClientPage)
def list_clients(
    search: Optional[str] = Query(default=None, description="Nom, email ou téléphone"),
    is_active: Optional[bool] = Query(default=None),
    paging: PageParams = Depends(page_params),
    user: AuthenticatedUser = Depends(_access),
):
    result = client_service.list_clients_page(
        search=search, is_active=is_active, page=paging.page, per_page=paging.per_page
    )
    return ClientPage(items=result.items, meta=result.meta())


@router.get("/{client_id}", response_model=ClientOut)
def get_client(client_id: str, user: AuthenticatedUser = Depends(_access)):
    return client_service.get_client(client_id)


@router.get("/{client_id}/history", response_model=ClientHistory)
def get_client_history(
    client_id: str,
    limit: int = Query(50, ge=1, le=500),
    user: AuthenticatedUser = Depends(_access),
):
    return client_service.get_client_history(client_id, limit=limit)


@router.post("", response_model=ClientOut, status_code=status.HTTP_201_CREATED)
def create_client(payload: ClientCreate, user: AuthenticatedUser = Depends(_access)):
    return client_service.create_client(payload.model_dump())


@router.put("/{client_id}", response_model=ClientOut)
def update_client(client_id: str, payload: ClientUpdate, user: AuthenticatedUser = Depends(_access)):
    return client_service.update_client(client_id, payload.model_dump(exclude_unset=True))


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_client(client_id: str, user: AuthenticatedUser = Depends(_access)) -> Response:
    client_service.delete_client(client_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
