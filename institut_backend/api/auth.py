"""Authentication endpoints (OAuth2 password flow with JWT)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.security import OAuth2PasswordRequestForm

from institut_backend.dependencies.security import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    AuthenticatedUser,
    create_access_token,
    get_current_user,
    oauth2_scheme,
    revoke_token,
)
from institut_backend.schemas.auth import AuthenticatedUserPayload, TokenResponse
from institut_core.permissions import ROLE_PERMISSIONS
from institut_core.supabase_client import SupabaseConfigError
from institut_core.user_service import authenticate_user, get_user


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/token", response_model=TokenResponse)
def issue_token(form_data: OAuth2PasswordRequestForm = Depends()) -> TokenResponse:
    """Le champ ``username`` accepte l'email ou le pseudo."""
    try:
        user = authenticate_user(form_data.username, form_data.password)
    except SupabaseConfigError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Identifiants invalides",
            headers={"WWW-Authenticate": "Bearer"},
        )

    username = user.pseudo or user.email
    claims = {
        "sub": str(user.id),
        "username": username,
        "role": user.role,
        "auth_id": user.auth_user_id,
    }
    token = create_access_token(claims)
    return TokenResponse(
        access_token=token,
        expires_in=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        user=AuthenticatedUserPayload(
            id=str(user.id),
            username=username,
            email=user.email,
            role=user.role,
            display_name=user.display_name,
            permissions=list(ROLE_PERMISSIONS.get(user.role, ())),
        ),
    )


@router.get("/me", response_model=AuthenticatedUserPayload)
def read_me(user: AuthenticatedUser = Depends(get_current_user)) -> AuthenticatedUserPayload:
    profile = get_user(user.id)
    if profile is None or not profile.is_active:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Profil introuvable ou désactivé")
    return AuthenticatedUserPayload(
        id=str(profile.id),
        username=user.username,
        email=profile.email,
        role=profile.role,
        display_name=profile.display_name,
        permissions=list(ROLE_PERMISSIONS.get(profile.role, ())),
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(token: str = Depends(oauth2_scheme), user: AuthenticatedUser = Depends(get_current_user)) -> Response:
    revoke_token(token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
