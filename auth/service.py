"""
Sign-up / sign-in workflow.

``sign_up`` turns a plaintext password into a stored bcrypt credential;
``sign_in`` turns a verified identity into a bearer token.  Both return a
``Result`` and never let a storage exception escape.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from auth.jwt import TokenService
from auth.password import PasswordHashError, PasswordHasher
from core.errors import DomainError, ErrorKind, Result
from database.gateway import PersistenceGateway
from database.translator import translate
from utils.schemas import TokenResponse, UserView
from utils.validators import normalize_email

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(
        self,
        gateway: PersistenceGateway,
        hasher: PasswordHasher,
        tokens: TokenService,
    ) -> None:
        self.gateway = gateway
        self.hasher = hasher
        self.tokens = tokens

    async def sign_up(self, email: str, password: str, name: str) -> Result[UserView]:
        """Register a new user.  Fails with DUPLICATE_EMAIL or INTERNAL."""
        email = normalize_email(email)
        try:
            password_hash = await self.hasher.hash(password)
        except PasswordHashError as exc:
            return Result.failure(DomainError.internal(str(exc)))

        try:
            user = await self.gateway.create_user(email, name, password_hash)
        except SQLAlchemyError as exc:
            error = translate(exc, allowed=(ErrorKind.DUPLICATE_EMAIL,))
            if error.kind is ErrorKind.DUPLICATE_EMAIL:
                logger.info("Sign-up rejected: %s already registered", email)
            else:
                logger.error("Failed to create user %s: %s", email, exc)
            return Result.failure(error)

        logger.info("Registered user %s (%s)", email, user.id)
        return Result.success(user.to_view())

    async def sign_in(self, email: str, password: str) -> Result[TokenResponse]:
        """
        Verify credentials and issue an access token.

        An unknown email and a wrong password produce the very same
        INVALID_CREDENTIALS error.
        """
        email = normalize_email(email)
        try:
            user = await self.gateway.find_user_by_email(email, include_hash=True)
        except SQLAlchemyError as exc:
            logger.error("Failed to look up user %s: %s", email, exc)
            return Result.failure(translate(exc))

        try:
            if user is None or not user.password_hash:
                await self.hasher.burn(password)
                verified = False
            else:
                verified = await self.hasher.verify(password, user.password_hash)
        except PasswordHashError as exc:
            logger.error("Stored credential for %s is unusable: %s", email, exc)
            return Result.failure(DomainError.internal(str(exc)))

        if not verified:
            logger.warning("Sign-in rejected for %s", email)
            return Result.fail(ErrorKind.INVALID_CREDENTIALS)

        token = self.tokens.issue(subject=str(user.id), email=user.email)
        logger.info("Login: %s (%s)", user.email, user.id)
        return Result.success(TokenResponse(access_token=token))
