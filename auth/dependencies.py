"""
FastAPI dependencies for authentication.

``get_current_claim`` is the request guard: a request either carries a
valid bearer token and gets its claim attached as ``request.state.identity``,
or it is rejected with 401 before any handler runs.  Missing header, wrong
scheme, bad signature, garbage and expiry all look the same from outside.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from api.errors import unauthenticated
from auth.jwt import TokenService, TokenValidationError
from utils.schemas import Claim

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


async def get_current_claim(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> Claim:
    if credentials is None or not credentials.credentials:
        raise unauthenticated()
    try:
        claim = tokens.validate(credentials.credentials)
    except TokenValidationError as exc:
        logger.info("Rejected bearer token on %s: %s", request.url.path, exc.reason.value)
        raise unauthenticated() from None

    request.state.identity = claim
    return claim


async def get_current_user_id(claim: Claim = Depends(get_current_claim)) -> str:
    """The authenticated caller's user id (the token subject)."""
    return claim.subject
