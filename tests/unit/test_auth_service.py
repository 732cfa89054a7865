"""Unit tests for AuthService (login lockout and refresh rotation wiring)."""

from datetime import timedelta

import pytest

from app.application.dtos.user import UserResult
from app.application.services.auth_service import AuthService
from app.application.services.login_attempt_service import (
    LocalAttemptFallback,
    LockoutPolicy,
    LoginAttemptService,
)
from app.application.services.refresh_token_service import RefreshTokenService
from app.domain.exceptions import (
    AccountLockedException,
    AuthenticationException,
    InactiveAccountException,
    RefreshTokenReuseException,
)
from app.infrastructure.security.jwt import verify_token
from tests.fakes import (
    FakeClock,
    FakeRefreshTokenRepository,
    FakeUserRepository,
    InMemoryStore,
    RecordingNotifier,
)

EMAIL = "author@blog.dev"
PASSWORD = "correct horse battery staple"


@pytest.fixture
def users() -> FakeUserRepository:
    return FakeUserRepository(
        [UserResult(id="u-1", email=EMAIL, name="Ada", role="AUTHOR", is_active=True)],
        {EMAIL: PASSWORD},
    )


@pytest.fixture
def tokens() -> FakeRefreshTokenRepository:
    return FakeRefreshTokenRepository()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def auth(
    users: FakeUserRepository,
    tokens: FakeRefreshTokenRepository,
    store: InMemoryStore,
    clock: FakeClock,
    notifier: RecordingNotifier,
) -> AuthService:
    policy = LockoutPolicy()
    attempts = LoginAttemptService(
        store,
        user_repo=users,
        notifier=notifier,
        policy=policy,
        fallback=LocalAttemptFallback(policy, clock=clock),
    )
    return AuthService(users, attempts, RefreshTokenService(tokens, lifetime=timedelta(days=7)))


async def test_login_issues_token_pair(auth: AuthService) -> None:
    pair = await auth.login("Author@Blog.dev", PASSWORD)
    claims = verify_token(pair.access_token)
    assert claims["sub"] == "u-1"
    assert claims["role"] == "AUTHOR"
    assert pair.email == EMAIL
    assert pair.name == "Ada"
    assert pair.token_type == "Bearer"
    assert pair.expires_in > 0
    assert len(pair.refresh_token) > 20


async def test_wrong_password_reports_remaining_attempts(auth: AuthService) -> None:
    with pytest.raises(AuthenticationException) as exc_info:
        await auth.login(EMAIL, "wrong")
    assert exc_info.value.details == {"remaining_attempts": 4}


async def test_fifth_failure_locks_account(auth: AuthService, notifier: RecordingNotifier) -> None:
    for _ in range(4):
        with pytest.raises(AuthenticationException):
            await auth.login(EMAIL, "wrong")
    with pytest.raises(AuthenticationException) as exc_info:
        await auth.login(EMAIL, "wrong")
    assert exc_info.value.details == {"remaining_attempts": 0}
    assert len(notifier.notifications) == 1

    # Even the right password is refused while locked.
    with pytest.raises(AccountLockedException):
        await auth.login(EMAIL, PASSWORD)


async def test_successful_login_clears_failures(auth: AuthService, store: InMemoryStore) -> None:
    for _ in range(3):
        with pytest.raises(AuthenticationException):
            await auth.login(EMAIL, "wrong")
    await auth.login(EMAIL, PASSWORD)
    assert await store.get("login_attempt:author@blog.dev") is None


async def test_refresh_rotates_token(auth: AuthService) -> None:
    pair = await auth.login(EMAIL, PASSWORD)
    refreshed = await auth.refresh(pair.refresh_token)
    assert refreshed.refresh_token != pair.refresh_token
    assert verify_token(refreshed.access_token)["sub"] == "u-1"
    with pytest.raises(RefreshTokenReuseException):
        await auth.refresh(pair.refresh_token)
    with pytest.raises(RefreshTokenReuseException):
        await auth.refresh(refreshed.refresh_token)


async def test_refresh_for_deactivated_user_revokes_without_rotating(
    auth: AuthService, users: FakeUserRepository, tokens: FakeRefreshTokenRepository
) -> None:
    pair = await auth.login(EMAIL, PASSWORD)
    users.users[EMAIL] = UserResult(id="u-1", email=EMAIL, name="Ada", role="AUTHOR", is_active=False)
    with pytest.raises(InactiveAccountException) as exc_info:
        await auth.refresh(pair.refresh_token)
    assert isinstance(exc_info.value, AuthenticationException)
    assert exc_info.value.user_id == "u-1"
    # No successor was issued.
    assert len(tokens.records) == 1
    assert all(record.revoked for record in tokens.records.values())


async def test_refresh_for_deleted_user_revokes_without_rotating(
    auth: AuthService, users: FakeUserRepository, tokens: FakeRefreshTokenRepository
) -> None:
    pair = await auth.login(EMAIL, PASSWORD)
    del users.users[EMAIL]
    with pytest.raises(InactiveAccountException):
        await auth.refresh(pair.refresh_token)
    assert len(tokens.records) == 1
    assert all(record.revoked for record in tokens.records.values())


async def test_logout_revokes_refresh_token(
    auth: AuthService, tokens: FakeRefreshTokenRepository
) -> None:
    pair = await auth.login(EMAIL, PASSWORD)
    await auth.logout(pair.refresh_token)
    assert all(record.revoked for record in tokens.records.values())
    await auth.logout(pair.refresh_token)
