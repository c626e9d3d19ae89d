from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class AuthenticatedUserPayload(BaseModel):
    id: str
    username: str
    email: str
    role: str = Field(description="superadmin | admin | manager | caissiere | employee")
    display_name: Optional[str] = None
    permissions: list[str] = Field(default_factory=list)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: AuthenticatedUserPayload


__all__ = ["AuthenticatedUserPayload", "TokenResponse"]
