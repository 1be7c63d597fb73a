"""
Taskvault — application entry point.
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.errors import register_exception_handlers
from api.middleware import register_middleware
from api.tasks import router as tasks_router
from api.users import router as users_router
from auth.jwt import TokenService
from auth.password import PasswordHasher
from auth.routes import router as auth_router
from auth.service import AuthService
from config.settings import Settings, config
from core.task_service import TaskService
from core.user_service import UserService
from database.gateway import PersistenceGateway

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
        stream=sys.stdout,
    )
    for _noisy in ("sqlalchemy.engine", "asyncio", "httpx", "aiosqlite"):
        logging.getLogger(_noisy).setLevel(logging.WARNING)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or config

    gateway = PersistenceGateway.from_settings(settings)
    hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    tokens = TokenService(settings.jwt_secret, ttl_seconds=settings.jwt_expiry_seconds)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await gateway.open()
        logger.info("Application ready to accept requests.")
        try:
            yield
        finally:
            await gateway.close()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        description="Accounts, bearer tokens and owner-scoped tasks.",
        lifespan=lifespan,
        root_path=settings.root_path or "",
    )

    app.state.settings = settings
    app.state.gateway = gateway
    app.state.token_service = tokens
    app.state.auth_service = AuthService(gateway, hasher, tokens)
    app.state.user_service = UserService(gateway, hasher)
    app.state.task_service = TaskService(gateway)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app)
    register_exception_handlers(app)

    # Routes
    app.include_router(auth_router, prefix="/api/v1/auth")
    app.include_router(users_router, prefix="/api/v1/users")
    app.include_router(tasks_router, prefix="/api/v1/tasks")

    @app.get("/health", tags=["health"])
    async def health():
        return {"status": "ok", "database": gateway.is_open}

    return app


configure_logging(config)
app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
