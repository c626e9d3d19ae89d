"""User administration endpoints (profiles in ``dd-users`` + Supabase Auth)."""

from __future__ import annotations

from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from institut_backend.dependencies.paging import PageParams, page_params
from institut_backend.dependencies.security import AuthenticatedUser, require_roles
from institut_backend.schemas.users import Role, UserCreateRequest, UserCreateResponse, UserOut, UserPage, UserUpdate
from institut_core import user_service
from institut_core.supabase_client import SupabaseAuthFailed, SupabaseConfigError

_admin = require_roles("admin", "superadmin")

router = APIRouter(prefix="/users", tags=["users"], dependencies=[Depends(_admin)])

# Route historique du dashboard : POST /api/admin/create-user
admin_router = APIRouter(prefix="/api/admin", tags=["users"])


@router.get("", response_model=UserPage)
def list_users(
    role: Optional[Role] = Query(default=None),
    is_active: Optional[bool] = Query(default=None),
    search: Optional[str] = Query(default=None),
    paging: PageParams = Depends(page_params),
):
    result = user_service.list_users_page(
        role=role, is_active=is_active, search=search, page=paging.page, per_page=paging.per_page
    )
    return UserPage(items=result.items, meta=result.meta())


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: str):
    user = user_service.get_user(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="Utilisateur introuvable.")
    return UserOut(**asdict(user))


def _create(payload: UserCreateRequest, creator: AuthenticatedUser) -> UserCreateResponse:
    try:
        user = user_service.create_user(
            payload.email,
            payload.password,
            role=payload.role,
            pseudo=payload.pseudo,
            first_name=payload.first_name,
            last_name=payload.last_name,
            phone=payload.phone,
            hire_date=payload.hire_date,
            created_by=creator.id,
        )
    except user_service.UserServiceError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except SupabaseAuthFailed as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except SupabaseConfigError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    return UserCreateResponse(success=True, user=UserOut(**asdict(user)), message="Utilisateur créé avec succès")


@router.post("", response_model=UserCreateResponse, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreateRequest, creator: AuthenticatedUser = Depends(_admin)):
    return _create(payload, creator)


@admin_router.post("/create-user", response_model=UserCreateResponse, status_code=status.HTTP_201_CREATED)
def create_user_legacy(payload: UserCreateRequest, creator: AuthenticatedUser = Depends(_admin)):
    return _create(payload, creator)


@router.put("/{user_id}", response_model=UserOut)
def update_user(user_id: str, payload: UserUpdate):
    try:
        user = user_service.update_user(user_id, payload.model_dump(exclude_unset=True))
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except user_service.UserServiceError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return UserOut(**asdict(user))
