"""
Auth API routes — signup, login, me.

Route prefix: /api/v1/auth
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from api.dependencies import get_auth_service
from api.errors import unwrap
from auth.dependencies import get_current_claim
from auth.service import AuthService
from utils.schemas import Claim, SignInRequest, SignUpRequest, TokenResponse, UserView

router = APIRouter(tags=["auth"])


@router.post("/signup", response_model=UserView, status_code=status.HTTP_201_CREATED)
async def signup(
    req: SignUpRequest,
    auth: AuthService = Depends(get_auth_service),
) -> UserView:
    """Register a new user."""
    return unwrap(await auth.sign_up(req.email, req.password, req.name))


@router.post("/login", response_model=TokenResponse)
async def login(
    req: SignInRequest,
    auth: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    """Login with email + password."""
    return unwrap(await auth.sign_in(req.email, req.password))


@router.get("/me")
async def me(claim: Claim = Depends(get_current_claim)) -> Dict[str, Any]:
    """The identity carried by the caller's token."""
    return {"sub": claim.subject, "email": claim.email, "exp": claim.expires_at}
