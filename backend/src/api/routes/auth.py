"""Token and identity routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from ...models.auth import TokenResponse
from ...models.user import User
from ...services.auth import AuthService
from ..middleware import AuthContext, get_auth_context, get_auth_service

router = APIRouter()


@router.post("/api/tokens", response_model=TokenResponse)
async def create_api_token(
    auth: Annotated[AuthContext, Depends(get_auth_context)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
):
    """Issue a new JWT for the authenticated user."""
    token, expires_at = auth_service.issue_token_response(auth.user_id)
    return TokenResponse(token=token, token_type="bearer", expires_at=expires_at)


@router.get("/api/me", response_model=User)
async def get_current_user(auth: Annotated[AuthContext, Depends(get_auth_context)]):
    """Return the identity behind the bearer token."""
    return User(user_id=auth.user_id)


__all__ = ["router"]
