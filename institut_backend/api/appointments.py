"""Rendez-vous endpoints (table ``dd-rdv``)."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from institut_backend.dependencies.paging import PageParams, page_params
from institut_backend.dependencies.security import AuthenticatedUser, require_resource
from institut_backend.schemas.appointments import (
    AppointmentCreate,
    AppointmentOut,
    AppointmentPage,
    AppointmentStatus,
    AppointmentStatusUpdate,
    AppointmentUpdate,
)
from institut_backend.services import appointments as appointment_service

router = APIRouter(prefix="/appointments", tags=["appointments"])

_access = require_resource("appointments")


@router.get("", response_model=AppointmentPage)
def list_appointments(
    statut: Optional[AppointmentStatus] = Query(default=None),
    client_id: Optional[str] = Query(default=None),
    employe_id: Optional[str] = Query(default=None),
    date_from: Optional[datetime] = Query(default=None),
    date_to: Optional[datetime] = Query(default=None),
    search: Optional[str] = Query(default=None),
    paging: PageParams = Depends(page_params),
    user: AuthenticatedUser = Depends(_access),
):
    result = appointment_service.list_appointments_page(
        statut=statut,
        client_id=client_id,
        employe_id=employe_id,
        date_from=date_from,
        date_to=date_to,
        search=search,
        page=paging.page,
        per_page=paging.per_page,
    )
    return AppointmentPage(items=result.items, meta=result.meta())


@router.get("/{appointment_id}", response_model=AppointmentOut)
def get_appointment(appointment_id: str, user: AuthenticatedUser = Depends(_access)):
    return appointment_service.get_appointment(appointment_id)


@router.post("", response_model=AppointmentOut, status_code=status.HTTP_201_CREATED)
def create_appointment(payload: AppointmentCreate, user: AuthenticatedUser = Depends(_access)):
    return appointment_service.create_appointment(payload.model_dump(), created_by=user.id)


@router.put("/{appointment_id}", response_model=AppointmentOut)
def update_appointment(
    appointment_id: str,
    payload: AppointmentUpdate,
    user: AuthenticatedUser = Depends(_access),
):
    return appointment_service.update_appointment(appointment_id, payload.model_dump(exclude_unset=True))


@router.patch("/{appointment_id}/status", response_model=AppointmentOut)
def set_appointment_status(
    appointment_id: str,
    payload: AppointmentStatusUpdate,
    user: AuthenticatedUser = Depends(_access),
):
    return appointment_service.set_status(appointment_id, payload.statut, user_id=user.id)


@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_appointment(appointment_id: str, user: AuthenticatedUser = Depends(_access)) -> Response:
    appointment_service.delete_appointment(appointment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
