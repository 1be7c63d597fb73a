"""
FastAPI dependencies (shared across routes).

Services are built once in ``create_app`` and kept on ``app.state``;
routes import their accessors from a single place.
"""

from __future__ import annotations

from fastapi import Request

from auth.service import AuthService
from core.task_service import TaskService
from core.user_service import UserService


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_task_service(request: Request) -> TaskService:
    return request.app.state.task_service


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service
