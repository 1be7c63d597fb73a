"""
Domain error taxonomy and the ``Result`` value returned by every service.

Services never raise storage or transport errors outward.  They return a
``Result`` carrying either a value or a ``DomainError``; the HTTP boundary
(``api/errors.py``) is the only place that turns an ``ErrorKind`` into a
status code.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    VALIDATION = "validation_error"
    DUPLICATE_EMAIL = "duplicate_email"
    INVALID_CREDENTIALS = "invalid_credentials"
    UNAUTHENTICATED = "unauthenticated"
    OWNER_NOT_FOUND = "owner_not_found"
    NOT_FOUND = "not_found"
    INTERNAL = "internal"


# Fixed, non-revealing messages.  Only INTERNAL may carry extra detail, and
# that detail stays server-side.
DEFAULT_MESSAGES = {
    ErrorKind.VALIDATION: "Invalid input",
    ErrorKind.DUPLICATE_EMAIL: "Email already registered",
    ErrorKind.INVALID_CREDENTIALS: "Invalid email or password",
    ErrorKind.UNAUTHENTICATED: "Not authenticated",
    ErrorKind.OWNER_NOT_FOUND: "User not found",
    ErrorKind.NOT_FOUND: "Resource not found",
    ErrorKind.INTERNAL: "Internal server error",
}


@dataclass(frozen=True)
class DomainError:
    kind: ErrorKind
    message: str
    detail: Optional[str] = None

    @classmethod
    def of(
        cls,
        kind: ErrorKind,
        message: Optional[str] = None,
        detail: Optional[str] = None,
    ) -> "DomainError":
        return cls(kind=kind, message=message or DEFAULT_MESSAGES[kind], detail=detail)

    @classmethod
    def internal(cls, detail: str) -> "DomainError":
        return cls.of(ErrorKind.INTERNAL, detail=detail)


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either ``value`` (success) or ``error`` (failure), never both."""

    value: Optional[T] = None
    error: Optional[DomainError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: DomainError) -> "Result[T]":
        return cls(error=error)

    @classmethod
    def fail(
        cls,
        kind: ErrorKind,
        message: Optional[str] = None,
        detail: Optional[str] = None,
    ) -> "Result[T]":
        return cls(error=DomainError.of(kind, message, detail))
