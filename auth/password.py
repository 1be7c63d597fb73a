"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic
salting and configurable work factor.  Both operations are CPU-bound and
run in a worker thread so they never block the event loop.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import bcrypt

# bcrypt ignores (recent releases reject) anything past 72 bytes.
_MAX_PASSWORD_BYTES = 72


class PasswordHashError(ValueError):
    """A stored hash could not be parsed."""


class PasswordHasher:
    def __init__(self, rounds: int = 10) -> None:
        self.rounds = rounds
        self._dummy_hash: Optional[str] = None

    def hash_sync(self, password: str) -> str:
        """Hash a password with bcrypt (auto-salted)."""
        raw = password.encode()
        if len(raw) > _MAX_PASSWORD_BYTES:
            raise PasswordHashError("password exceeds bcrypt's 72-byte limit")
        return bcrypt.hashpw(raw, bcrypt.gensalt(rounds=self.rounds)).decode()

    def verify_sync(self, password: str, password_hash: str) -> bool:
        """Constant-time comparison against a bcrypt hash."""
        raw = password.encode()
        if len(raw) > _MAX_PASSWORD_BYTES:
            return False
        try:
            return bcrypt.checkpw(raw, password_hash.encode())
        except (ValueError, TypeError) as exc:
            raise PasswordHashError(f"malformed password hash: {exc}") from exc

    async def hash(self, password: str) -> str:
        return await asyncio.to_thread(self.hash_sync, password)

    async def verify(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(self.verify_sync, password, password_hash)

    async def burn(self, password: str) -> None:
        """
        Spend the same effort as a real verify without any stored hash.

        Used when a sign-in names an unknown account, so that path costs as
        much as a wrong password.
        """
        if self._dummy_hash is None:
            self._dummy_hash = await self.hash("taskvault-dummy-password")
        await self.verify(password, self._dummy_hash)
