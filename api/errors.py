"""
Domain error → HTTP status mapping.

The only place that knows about transport-level status codes.
"""

from __future__ import annotations

import logging
from typing import TypeVar

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from core.errors import DEFAULT_MESSAGES, ErrorKind, Result

logger = logging.getLogger(__name__)

T = TypeVar("T")

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.DUPLICATE_EMAIL: status.HTTP_409_CONFLICT,
    ErrorKind.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.OWNER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

_BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


def unwrap(result: Result[T]) -> T:
    """Return the value of a successful result, or raise the matching HTTP error."""
    if result.ok:
        return result.value

    error = result.error
    if error.kind is ErrorKind.INTERNAL:
        logger.error("Internal error: %s", error.detail or "no detail")
    headers = (
        _BEARER_CHALLENGE
        if error.kind in (ErrorKind.INVALID_CREDENTIALS, ErrorKind.UNAUTHENTICATED)
        else None
    )
    raise HTTPException(
        status_code=STATUS_BY_KIND[error.kind],
        detail=error.message,
        headers=headers,
    )


def unauthenticated() -> HTTPException:
    return HTTPException(
        status_code=STATUS_BY_KIND[ErrorKind.UNAUTHENTICATED],
        detail=DEFAULT_MESSAGES[ErrorKind.UNAUTHENTICATED],
        headers=_BEARER_CHALLENGE,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Request-shape failures are 400; anything unhandled is a bare 500."""

    @app.exception_handler(RequestValidationError)
    async def validation_failed(request: Request, exc: RequestValidationError):
        logger.debug("Invalid input on %s %s: %s", request.method, request.url.path, exc.errors())
        return JSONResponse(
            status_code=STATUS_BY_KIND[ErrorKind.VALIDATION],
            content={
                "detail": DEFAULT_MESSAGES[ErrorKind.VALIDATION],
                "errors": jsonable_encoder(exc.errors(), custom_encoder={Exception: str}),
            },
        )

    @app.exception_handler(Exception)
    async def unhandled(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=STATUS_BY_KIND[ErrorKind.INTERNAL],
            content={"detail": DEFAULT_MESSAGES[ErrorKind.INTERNAL]},
        )
