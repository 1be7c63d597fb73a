"""
User profile operations: read, list, update and delete accounts.
"""

from __future__ import annotations

import logging
from typing import Any, List

from sqlalchemy.exc import SQLAlchemyError

from auth.password import PasswordHashError, PasswordHasher
from core.errors import DomainError, ErrorKind, Result
from database.gateway import PersistenceGateway
from database.translator import translate
from utils.schemas import UNSET, UserView, present_fields
from utils.validators import normalize_email

logger = logging.getLogger(__name__)

USER_NOT_FOUND = "User not found"


class UserService:
    def __init__(self, gateway: PersistenceGateway, hasher: PasswordHasher) -> None:
        self.gateway = gateway
        self.hasher = hasher

    @staticmethod
    def _failure(exc: SQLAlchemyError, *allowed: ErrorKind) -> Result:
        error = translate(exc, allowed=allowed)
        if error.kind is ErrorKind.NOT_FOUND:
            return Result.fail(ErrorKind.NOT_FOUND, USER_NOT_FOUND)
        return Result.failure(error)

    async def get_user(self, user_id: str) -> Result[UserView]:
        try:
            user = await self.gateway.find_user_by_id(user_id)
        except SQLAlchemyError as exc:
            logger.error("Failed to get user %s: %s", user_id, exc)
            return self._failure(exc)
        if user is None:
            return Result.fail(ErrorKind.NOT_FOUND, USER_NOT_FOUND)
        return Result.success(user.to_view())

    async def get_profile(self, user_id: str) -> Result[UserView]:
        """The caller's own profile; the account may have been deleted since sign-in."""
        return await self.get_user(user_id)

    async def list_users(self) -> Result[List[UserView]]:
        try:
            users = await self.gateway.list_users()
        except SQLAlchemyError as exc:
            logger.error("Failed to list users: %s", exc)
            return self._failure(exc)
        return Result.success([user.to_view() for user in users])

    async def update_profile(
        self,
        user_id: str,
        *,
        email: Any = UNSET,
        name: Any = UNSET,
        password: Any = UNSET,
    ) -> Result[UserView]:
        fields = present_fields(name=name)
        if email is not UNSET:
            fields["email"] = normalize_email(email)
        if password is not UNSET:
            try:
                fields["password_hash"] = await self.hasher.hash(password)
            except PasswordHashError as exc:
                return Result.failure(DomainError.internal(str(exc)))

        try:
            user = await self.gateway.update_user(user_id, fields)
        except SQLAlchemyError as exc:
            logger.warning("Update user failed for %s: %s", user_id, exc)
            return self._failure(exc, ErrorKind.NOT_FOUND, ErrorKind.DUPLICATE_EMAIL)

        logger.info("Updated user %s (%s)", user_id, ", ".join(sorted(fields)) or "no fields")
        return Result.success(user.to_view())

    async def delete_account(self, user_id: str) -> Result[None]:
        """Remove the user; their tasks go with them."""
        try:
            await self.gateway.delete_user(user_id)
        except SQLAlchemyError as exc:
            logger.warning("Delete user failed for %s: %s", user_id, exc)
            return self._failure(exc, ErrorKind.NOT_FOUND)
        logger.info("Deleted user %s", user_id)
        return Result.success(None)
