"""
User profile routes.  Reads are open to any signed-in user; changes are
limited to the caller's own account.

Route prefix: /api/v1/users
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response, status

from api.dependencies import get_user_service
from api.errors import unwrap
from auth.dependencies import get_current_user_id
from core.user_service import UserService
from utils.schemas import UpdateProfileRequest, UserView

router = APIRouter(tags=["users"])


@router.get("", response_model=List[UserView])
async def list_users(
    _: str = Depends(get_current_user_id),
    users: UserService = Depends(get_user_service),
) -> List[UserView]:
    return unwrap(await users.list_users())


@router.get("/me", response_model=UserView)
async def read_me(
    user_id: str = Depends(get_current_user_id),
    users: UserService = Depends(get_user_service),
) -> UserView:
    return unwrap(await users.get_profile(user_id))


@router.patch("/me", response_model=UserView)
async def update_me(
    req: UpdateProfileRequest,
    user_id: str = Depends(get_current_user_id),
    users: UserService = Depends(get_user_service),
) -> UserView:
    return unwrap(await users.update_profile(user_id, **req.model_dump(exclude_unset=True)))


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
async def delete_me(
    user_id: str = Depends(get_current_user_id),
    users: UserService = Depends(get_user_service),
) -> Response:
    unwrap(await users.delete_account(user_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{user_id}", response_model=UserView)
async def read_user(
    user_id: str,
    _: str = Depends(get_current_user_id),
    users: UserService = Depends(get_user_service),
) -> UserView:
    return unwrap(await users.get_user(user_id))
