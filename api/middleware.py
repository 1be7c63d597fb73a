"""
Global middleware.
"""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request

logger = logging.getLogger(__name__)


def register_middleware(app: FastAPI) -> None:
    """Attach any app-level middleware."""

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        # Every request starts unauthenticated; the auth guard sets the claim.
        request.state.identity = None
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"

        identity = request.state.identity
        logger.debug(
            "%s %s → %d — %.3fs (%s)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed,
            identity.subject if identity is not None else "anonymous",
        )
        return response
