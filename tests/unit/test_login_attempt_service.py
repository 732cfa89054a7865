"""Unit tests for LoginAttemptService, LockoutPolicy and LocalAttemptFallback."""

from datetime import timedelta

import pytest

from app.application.dtos.user import UserResult
from app.application.services.login_attempt_service import (
    LocalAttemptFallback,
    LockoutPolicy,
    LoginAttemptService,
)
from app.domain.exceptions import AccountLockedException
from tests.fakes import (
    FailingStore,
    FakeClock,
    FakeUserRepository,
    InMemoryStore,
    RecordingNotifier,
)

EMAIL = "author@blog.dev"


@pytest.fixture
def policy() -> LockoutPolicy:
    return LockoutPolicy()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def service(
    store: InMemoryStore, clock: FakeClock, policy: LockoutPolicy, notifier: RecordingNotifier
) -> LoginAttemptService:
    users = FakeUserRepository(
        [UserResult(id="u-1", email=EMAIL, name="Ada", role="AUTHOR", is_active=True)]
    )
    return LoginAttemptService(
        store,
        user_repo=users,
        notifier=notifier,
        policy=policy,
        fallback=LocalAttemptFallback(policy, clock=clock),
    )


@pytest.mark.parametrize(
    ("attempts", "minutes"),
    [(5, 5), (6, 10), (7, 15), (10, 30), (11, 30), (50, 30)],
)
def test_lockout_duration_grows_then_caps(policy: LockoutPolicy, attempts: int, minutes: int) -> None:
    assert policy.lockout_duration(attempts) == timedelta(minutes=minutes)


def test_lockout_duration_never_below_base() -> None:
    policy = LockoutPolicy(max_attempts=5)
    assert policy.lockout_duration(1) == timedelta(minutes=5)


async def test_below_threshold_not_blocked(service: LoginAttemptService) -> None:
    for expected in range(1, 5):
        assert await service.record_failed_attempt(EMAIL) == expected
    assert not await service.is_blocked(EMAIL)
    assert await service.get_failed_attempts(EMAIL) == 4
    assert await service.get_remaining_attempts(EMAIL) == 1


async def test_threshold_locks_and_notifies_once(
    service: LoginAttemptService, store: InMemoryStore, notifier: RecordingNotifier
) -> None:
    """Five failures lock the account for five minutes and send one email."""
    for _ in range(5):
        await service.record_failed_attempt(EMAIL, client_ip="203.0.113.7")

    assert await service.is_blocked(EMAIL)
    assert await store.get("lockout:author@blog.dev") == "5"
    assert await service.get_remaining_lockout_time(EMAIL) == 300
    assert await service.get_remaining_attempts(EMAIL) == 0
    assert notifier.notifications == [
        {
            "email": EMAIL,
            "name": "Ada",
            "attempts": 5,
            "lockout_minutes": 5,
            "client_ip": "203.0.113.7",
        }
    ]

    # Sixth failure extends the lockout but sends no second email.
    assert await service.record_failed_attempt(EMAIL) == 6
    assert await service.get_remaining_lockout_time(EMAIL) == 600
    assert len(notifier.notifications) == 1


async def test_attempt_window_set_once(
    service: LoginAttemptService, store: InMemoryStore, clock: FakeClock
) -> None:
    await service.record_failed_attempt(EMAIL)
    assert await store.get_expire("login_attempt:author@blog.dev") == 900
    clock.advance(60)
    await service.record_failed_attempt(EMAIL)
    assert await store.get_expire("login_attempt:author@blog.dev") == 840


async def test_counter_resets_after_window(service: LoginAttemptService, clock: FakeClock) -> None:
    for _ in range(4):
        await service.record_failed_attempt(EMAIL)
    clock.advance(15 * 60 + 1)
    assert await service.get_failed_attempts(EMAIL) == 0
    assert await service.record_failed_attempt(EMAIL) == 1


async def test_identity_is_case_insensitive(service: LoginAttemptService) -> None:
    await service.record_failed_attempt("Author@Blog.dev")
    await service.record_failed_attempt(" author@blog.dev ")
    assert await service.get_failed_attempts(EMAIL) == 2


async def test_no_notification_for_unknown_account(
    service: LoginAttemptService, notifier: RecordingNotifier
) -> None:
    for _ in range(5):
        await service.record_failed_attempt("ghost@blog.dev")
    assert await service.is_blocked("ghost@blog.dev")
    assert notifier.notifications == []


async def test_notifier_failure_does_not_break_recording(store: InMemoryStore, policy: LockoutPolicy) -> None:
    class BrokenNotifier:
        async def send_account_lockout_notification(self, *args, **kwargs) -> None:
            raise RuntimeError("smtp down")

    users = FakeUserRepository(
        [UserResult(id="u-1", email=EMAIL, name="Ada", role="AUTHOR", is_active=True)]
    )
    service = LoginAttemptService(store, user_repo=users, notifier=BrokenNotifier(), policy=policy)
    for _ in range(5):
        attempts = await service.record_failed_attempt(EMAIL)
    assert attempts == 5
    assert await service.is_blocked(EMAIL)


async def test_clear_failed_attempts_lifts_lockout(service: LoginAttemptService) -> None:
    for _ in range(5):
        await service.record_failed_attempt(EMAIL)
    await service.clear_failed_attempts(EMAIL)
    assert not await service.is_blocked(EMAIL)
    assert await service.get_failed_attempts(EMAIL) == 0
    assert await service.get_remaining_lockout_time(EMAIL) == 0


async def test_ensure_not_blocked_reports_minutes(service: LoginAttemptService) -> None:
    await service.ensure_not_blocked(EMAIL)
    for _ in range(5):
        await service.record_failed_attempt(EMAIL)
    with pytest.raises(AccountLockedException) as exc_info:
        await service.ensure_not_blocked(EMAIL)
    # 300 seconds remaining -> 300 // 60 + 1
    assert exc_info.value.remaining_minutes == 6
    assert exc_info.value.details == {"remaining_minutes": 6}


async def test_lockout_expires(service: LoginAttemptService, clock: FakeClock) -> None:
    for _ in range(5):
        await service.record_failed_attempt(EMAIL)
    clock.advance(301)
    assert not await service.is_blocked(EMAIL)


async def test_store_outage_fails_open_for_fresh_identity(policy: LockoutPolicy) -> None:
    service = LoginAttemptService(FailingStore(), policy=policy)
    assert not await service.is_blocked(EMAIL)
    assert await service.get_remaining_lockout_time(EMAIL) == 0
    await service.clear_failed_attempts(EMAIL)


async def test_store_outage_counts_locally(policy: LockoutPolicy, clock: FakeClock) -> None:
    """record_failed_attempt returns 1 but the local fallback keeps counting."""
    service = LoginAttemptService(
        FailingStore(), policy=policy, fallback=LocalAttemptFallback(policy, clock=clock)
    )
    for _ in range(4):
        assert await service.record_failed_attempt(EMAIL) == 1
    assert not await service.is_blocked(EMAIL)
    assert await service.get_failed_attempts(EMAIL) == 4

    await service.record_failed_attempt(EMAIL)
    assert await service.is_blocked(EMAIL)
    assert await service.get_remaining_lockout_time(EMAIL) == 300


async def test_outage_continues_from_mirrored_count(service: LoginAttemptService) -> None:
    for _ in range(3):
        await service.record_failed_attempt(EMAIL)
    service.store = FailingStore()
    assert await service.get_failed_attempts(EMAIL) == 3
    await service.record_failed_attempt(EMAIL)
    await service.record_failed_attempt(EMAIL)
    assert await service.is_blocked(EMAIL)


def test_local_fallback_evicts_oldest_identity(policy: LockoutPolicy, clock: FakeClock) -> None:
    fallback = LocalAttemptFallback(policy, max_entries=2, clock=clock)
    fallback.record_failure("a")
    fallback.record_failure("b")
    fallback.record_failure("c")
    fallback.record_failure("d")
    assert fallback.failed_attempts("a") == 0
    assert fallback.failed_attempts("c") == 1
    assert fallback.failed_attempts("d") == 1


def test_local_fallback_counter_expires(policy: LockoutPolicy, clock: FakeClock) -> None:
    fallback = LocalAttemptFallback(policy, clock=clock)
    fallback.record_failure("a")
    clock.advance(policy.attempt_window.total_seconds())
    assert fallback.failed_attempts("a") == 0
    assert fallback.record_failure("a") == 1
