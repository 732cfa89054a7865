"""Tests for auth endpoints (validation, lockout and rotation status codes).

The database-backed AuthService is replaced with one built on in-memory
repositories so the success paths run without Postgres.
"""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from app.api.v1.dependencies import get_auth_service
from app.application.dtos.user import UserResult
from app.application.services.auth_service import AuthService
from app.application.services.login_attempt_service import LockoutPolicy, LoginAttemptService
from app.application.services.refresh_token_service import RefreshTokenService
from app.core.config import get_settings
from app.main import app
from tests.fakes import FakeRefreshTokenRepository, FakeUserRepository, InMemoryStore

EMAIL = "author@blog.dev"
PASSWORD = "correct horse battery staple"


@pytest.fixture
def fake_auth(client: AsyncClient, store: InMemoryStore) -> AuthService:
    users = FakeUserRepository(
        [UserResult(id="u-1", email=EMAIL, name="Ada", role="AUTHOR", is_active=True)],
        {EMAIL: PASSWORD},
    )
    service = AuthService(
        users,
        LoginAttemptService(store, policy=LockoutPolicy()),
        RefreshTokenService(FakeRefreshTokenRepository(), lifetime=timedelta(days=7)),
    )
    app.dependency_overrides[get_auth_service] = lambda: service
    return service


async def test_login_missing_body_returns_422(client: AsyncClient) -> None:
    response = await client.post("/api/v1/auth/login", json={})
    assert response.status_code == 422
    assert response.json()["error"] == "VALIDATION_ERROR"


async def test_login_invalid_email_returns_422(client: AsyncClient) -> None:
    response = await client.post(
        "/api/v1/auth/login", json={"email": "not-an-email", "password": "x"}
    )
    assert response.status_code == 422


async def test_login_without_database_returns_503(client: AsyncClient) -> None:
    if get_settings().database_url:
        pytest.skip("DATABASE_URL is configured")
    response = await client.post("/api/v1/auth/login", json={"email": EMAIL, "password": "x"})
    assert response.status_code == 503
    assert response.json()["error"] == "DATABASE_UNAVAILABLE"


async def test_login_success(client: AsyncClient, fake_auth: AuthService) -> None:
    response = await client.post("/api/v1/auth/login", json={"email": EMAIL, "password": PASSWORD})
    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "Bearer"
    assert body["email"] == EMAIL
    assert body["access_token"]
    assert body["refresh_token"]


async def test_wrong_password_then_lockout(client: AsyncClient, fake_auth: AuthService) -> None:
    for remaining in (4, 3, 2, 1, 0):
        response = await client.post("/api/v1/auth/login", json={"email": EMAIL, "password": "wrong"})
        assert response.status_code == 401
        assert response.json()["details"] == {"remaining_attempts": remaining}

    response = await client.post("/api/v1/auth/login", json={"email": EMAIL, "password": PASSWORD})
    assert response.status_code == 423
    assert response.json()["error"] == "ACCOUNT_LOCKED"


async def test_refresh_rotation_and_reuse(client: AsyncClient, fake_auth: AuthService) -> None:
    login = await client.post("/api/v1/auth/login", json={"email": EMAIL, "password": PASSWORD})
    original = login.json()["refresh_token"]

    rotated = await client.post("/api/v1/auth/refresh", json={"refresh_token": original})
    assert rotated.status_code == 200
    assert rotated.json()["refresh_token"] != original

    reused = await client.post("/api/v1/auth/refresh", json={"refresh_token": original})
    assert reused.status_code == 401
    assert reused.json()["error"] == "SECURITY_VIOLATION"
    assert reused.json()["details"] == {"reason": "reuse"}


async def test_refresh_unknown_token_returns_404(client: AsyncClient, fake_auth: AuthService) -> None:
    response = await client.post("/api/v1/auth/refresh", json={"refresh_token": "unknown"})
    assert response.status_code == 404


async def test_logout_returns_204(client: AsyncClient, fake_auth: AuthService) -> None:
    login = await client.post("/api/v1/auth/login", json={"email": EMAIL, "password": PASSWORD})
    token = login.json()["refresh_token"]
    response = await client.post("/api/v1/auth/logout", json={"refresh_token": token})
    assert response.status_code == 204
    refresh = await client.post("/api/v1/auth/refresh", json={"refresh_token": token})
    assert refresh.status_code == 401
