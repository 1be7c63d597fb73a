"""
JWT-style token creation and verification.

Tokens are a base64url-encoded JSON payload and an HMAC-SHA256 signature
over it, joined by a dot.  The payload holds the subject (user id), the
email, and the issue/expiry timestamps; nothing else.  Nothing is stored
server-side: a token is valid exactly when its signature checks out and it
has not expired.
"""

from __future__ import annotations

import binascii
import hashlib
import hmac
import json
import time
from base64 import urlsafe_b64decode, urlsafe_b64encode
from enum import Enum
from typing import Callable

from utils.schemas import Claim


class TokenError(str, Enum):
    MALFORMED = "malformed"
    INVALID_SIGNATURE = "invalid_signature"
    EXPIRED = "expired"


class TokenValidationError(Exception):
    """Raised by ``TokenService.validate``.  ``reason`` never leaves the server."""

    def __init__(self, reason: TokenError) -> None:
        super().__init__(reason.value)
        self.reason = reason


def _b64encode(raw: bytes) -> str:
    return urlsafe_b64encode(raw).rstrip(b"=").decode()


def _b64decode(segment: str) -> bytes:
    padding = "=" * (-len(segment) % 4)
    return urlsafe_b64decode(segment + padding)


class TokenService:
    def __init__(
        self,
        secret: str,
        ttl_seconds: int = 3600,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret:
            raise ValueError("token secret must not be empty")
        self._secret = secret.encode()
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    def _sign(self, segment: str) -> str:
        return hmac.new(self._secret, segment.encode(), hashlib.sha256).hexdigest()

    def issue(self, subject: str, email: str) -> str:
        """Create a signed token for ``subject`` expiring after the TTL."""
        issued_at = int(self._clock())
        payload = {
            "sub": subject,
            "email": email,
            "iat": issued_at,
            "exp": issued_at + self.ttl_seconds,
        }
        segment = _b64encode(json.dumps(payload, separators=(",", ":")).encode())
        return segment + "." + self._sign(segment)

    def validate(self, token: str) -> Claim:
        """
        Verify ``token`` and return its claim.

        Raises ``TokenValidationError`` when the token is malformed, the
        signature does not match, or ``now >= exp``.
        """
        parts = token.split(".")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise TokenValidationError(TokenError.MALFORMED)
        segment, signature = parts

        if not hmac.compare_digest(signature.encode(), self._sign(segment).encode()):
            raise TokenValidationError(TokenError.INVALID_SIGNATURE)

        try:
            payload = json.loads(_b64decode(segment))
            claim = Claim(
                subject=payload["sub"],
                email=payload["email"],
                issued_at=payload["iat"],
                expires_at=payload["exp"],
            )
        except (binascii.Error, ValueError, TypeError, KeyError):
            raise TokenValidationError(TokenError.MALFORMED) from None

        if self._clock() >= claim.expires_at:
            raise TokenValidationError(TokenError.EXPIRED)
        return claim
