"""
Shared pytest fixtures.

Services run against a real gateway backed by a throw-away SQLite file
(via aiosqlite); HTTP tests drive the full app through ``TestClient``.
"""

from typing import Dict

import pytest
from fastapi.testclient import TestClient

from auth.jwt import TokenService
from auth.password import PasswordHasher
from auth.service import AuthService
from config.settings import Settings
from core.task_service import TaskService
from core.user_service import UserService
from database.gateway import PersistenceGateway
from main import create_app


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'taskvault.db'}",
        jwt_secret="test-secret",
        jwt_expiry_seconds=3600,
        bcrypt_rounds=4,
        db_create_schema=True,
    )


@pytest.fixture
async def gateway(settings):
    gateway = PersistenceGateway.from_settings(settings)
    await gateway.open()
    yield gateway
    await gateway.close()


@pytest.fixture
def hasher(settings) -> PasswordHasher:
    return PasswordHasher(rounds=settings.bcrypt_rounds)


@pytest.fixture
def tokens(settings) -> TokenService:
    return TokenService(settings.jwt_secret, ttl_seconds=settings.jwt_expiry_seconds)


@pytest.fixture
def auth_service(gateway, hasher, tokens) -> AuthService:
    return AuthService(gateway, hasher, tokens)


@pytest.fixture
def task_service(gateway) -> TaskService:
    return TaskService(gateway)


@pytest.fixture
def user_service(gateway, hasher) -> UserService:
    return UserService(gateway, hasher)


@pytest.fixture
async def alice(auth_service):
    result = await auth_service.sign_up("alice@example.com", "Password123!", "Alice")
    assert result.ok
    return result.value


@pytest.fixture
async def bob(auth_service):
    result = await auth_service.sign_up("bob@example.com", "Password123!", "Bob")
    assert result.ok
    return result.value


# ── HTTP ───────────────────────────────────────────────────────────────


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as client:
        yield client


@pytest.fixture
def signup_and_login(client):
    """Register + login; return the Authorization header for the new user."""

    def _signup_and_login(email: str, password: str = "Secret123!", name: str = "User") -> Dict[str, str]:
        resp = client.post(
            "/api/v1/auth/signup",
            json={"email": email, "password": password, "name": name},
        )
        assert resp.status_code == 201, resp.text
        resp = client.post("/api/v1/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return {"Authorization": f"Bearer {resp.json()['access_token']}"}

    return _signup_and_login
