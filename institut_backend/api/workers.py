"""Worker profile endpoints (``dd-travailleurs``)."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from institut_backend.dependencies.paging import PageParams, page_params
from institut_backend.dependencies.security import AuthenticatedUser, require_roles
from institut_backend.schemas.workers import WorkerActivity, WorkerCreate, WorkerOut, WorkerPage, WorkerUpdate
from institut_backend.services import workers as worker_service

router = APIRouter(prefix="/workers", tags=["workers"])

# Salaires et paiements : lecture manager, écriture administrateurs.
_read = require_roles("superadmin", "admin", "manager")
_write = require_roles("superadmin", "admin")


@router.get("", response_model=WorkerPage)
def list_workers(
    search: Optional[str] = Query(default=None, description="Nom, téléphone, email ou spécialité"),
    is_active: Optional[bool] = Query(default=None),
    specialite: Optional[str] = Query(default=None),
    paging: PageParams = Depends(page_params),
    user: AuthenticatedUser = Depends(_read),
):
    result = worker_service.list_workers_page(
        search=search, is_active=is_active, specialite=specialite, page=paging.page, per_page=paging.per_page
    )
    return WorkerPage(items=result.items, meta=result.meta())


@router.get("/{worker_id}", response_model=WorkerOut)
def get_worker(worker_id: str, user: AuthenticatedUser = Depends(_read)):
    return worker_service.get_worker(worker_id)


@router.post("", response_model=WorkerOut, status_code=status.HTTP_201_CREATED)
def create_worker(payload: WorkerCreate, user: AuthenticatedUser = Depends(_write)):
    return worker_service.create_worker(payload.model_dump())


@router.put("/{worker_id}", response_model=WorkerOut)
def update_worker(worker_id: str, payload: WorkerUpdate, user: AuthenticatedUser = Depends(_write)):
    return worker_service.update_worker(worker_id, payload.model_dump(exclude_unset=True))


@router.post("/{worker_id}/activity", response_model=WorkerOut)
def record_activity(worker_id: str, payload: WorkerActivity, user: AuthenticatedUser = Depends(_write)):
    try:
        return worker_service.record_activity(worker_id, payload.model_dump(), added_by=user.id)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.delete("/{worker_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_worker(worker_id: str, user: AuthenticatedUser = Depends(_write)) -> Response:
    worker_service.delete_worker(worker_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
