"""Failed-login tracking with progressive lockout and a one-shot lockout email.

Per identity (lowercase email) the tracker moves through three states:
not tracked, accumulating (login_attempt:<email> counter alive) and locked
(lockout:<email> present). The counter window starts at the first failure
and is not extended by later ones.

Store outages:
- is_blocked fails open (only a live local lockout blocks).
- record_failed_attempt counts in LocalAttemptFallback and returns 1.
- clear_failed_attempts never raises.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import timedelta

from app.application.interfaces.repositories import IUserRepository
from app.application.interfaces.services import ISecurityNotifier
from app.core.config import Settings, get_settings
from app.domain.exceptions import AccountLockedException
from app.infrastructure.cache.cache_protocol import KeyValueStore
from app.infrastructure.cache.fallback import or_else
from app.infrastructure.cache.keys import (
    lockout_key,
    lockout_notified_key,
    login_attempt_key,
    normalize_identity,
)
from app.infrastructure.exceptions import StoreUnavailableError
from app.shared.telemetry.tracing import traced
from app.shared.utils.client_ip import anonymize_ip

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LockoutPolicy:
    """Attempt threshold, counting window and progressive lockout durations."""

    max_attempts: int = 5
    attempt_window: timedelta = timedelta(minutes=15)
    lockout_base: timedelta = timedelta(minutes=5)
    max_multiplier: int = 6

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> LockoutPolicy:
        settings = settings or get_settings()
        return cls(
            max_attempts=settings.login_max_attempts,
            attempt_window=timedelta(minutes=settings.login_attempt_window_minutes),
            lockout_base=timedelta(minutes=settings.login_lockout_base_minutes),
            max_multiplier=settings.login_lockout_max_multiplier,
        )

    def lockout_duration(self, attempts: int) -> timedelta:
        """Lockout for a failure count at or above max_attempts.

        Grows by lockout_base for every failure past the threshold and is
        capped at lockout_base * max_multiplier.
        """
        multiplier = min(attempts - self.max_attempts + 1, self.max_multiplier)
        return self.lockout_base * max(multiplier, 1)


class LocalAttemptFallback:
    """In-process failure counters used only while the store is unavailable.

    Best effort and per process: with several workers an attacker gets
    max_attempts tries per worker. Entries expire on their own (counters
    after the attempt window, lockouts at their deadline); at most
    max_entries identities are kept, oldest dropped first.
    """

    def __init__(
        self,
        policy: LockoutPolicy,
        max_entries: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.policy = policy
        self.max_entries = max_entries
        self._clock = clock
        self._lock = threading.Lock()
        # identity -> (count, expires_at)
        self._attempts: dict[str, tuple[int, float]] = {}
        # identity -> locked_until
        self._lockouts: dict[str, float] = {}

    def _evict(self, now: float) -> None:
        for identity in [k for k, (_, exp) in self._attempts.items() if exp <= now]:
            del self._attempts[identity]
        for identity in [k for k, until in self._lockouts.items() if until <= now]:
            del self._lockouts[identity]
        # dicts keep insertion order, so the first key is the oldest entry
        while len(self._attempts) > self.max_entries:
            del self._attempts[next(iter(self._attempts))]
        while len(self._lockouts) > self.max_entries:
            del self._lockouts[next(iter(self._lockouts))]

    def record_failure(self, identity: str) -> int:
        """Increment the local counter; start a local lockout at the threshold."""
        with self._lock:
            now = self._clock()
            self._evict(now)
            count, expires_at = self._attempts.get(
                identity, (0, now + self.policy.attempt_window.total_seconds())
            )
            count += 1
            self._attempts[identity] = (count, expires_at)
            if count >= self.policy.max_attempts:
                self._lockouts[identity] = (
                    now + self.policy.lockout_duration(count).total_seconds()
                )
            return count

    def mirror(self, identity: str, count: int, lockout: timedelta | None = None) -> None:
        """Copy the store's view so a later outage starts from the real count."""
        with self._lock:
            now = self._clock()
            self._evict(now)
            entry = self._attempts.get(identity)
            if entry is None or count == 1:
                expires_at = now + self.policy.attempt_window.total_seconds()
            else:
                expires_at = entry[1]
            self._attempts[identity] = (count, expires_at)
            if lockout is not None:
                self._lockouts[identity] = now + lockout.total_seconds()

    def failed_attempts(self, identity: str) -> int:
        with self._lock:
            entry = self._attempts.get(identity)
            if entry is None or entry[1] <= self._clock():
                return 0
            return entry[0]

    def remaining_lockout_seconds(self, identity: str) -> int:
        with self._lock:
            until = self._lockouts.get(identity)
            if until is None:
                return 0
            return max(0, int(until - self._clock()))

    def is_blocked(self, identity: str) -> bool:
        return self.remaining_lockout_seconds(identity) > 0

    def clear(self, identity: str) -> None:
        with self._lock:
            self._attempts.pop(identity, None)
            self._lockouts.pop(identity, None)


class LoginAttemptService:
    """Brute-force protection for the login endpoint.

    Args:
        store: Shared key-value store holding counters and lockout flags.
        user_repo: Used to find the account owner for the lockout email.
        notifier: Sends the lockout email; None disables notifications.
        policy: Thresholds and durations (defaults from settings).
        fallback: Local counters for store outages (one per process).
    """

    def __init__(
        self,
        store: KeyValueStore,
        user_repo: IUserRepository | None = None,
        notifier: ISecurityNotifier | None = None,
        policy: LockoutPolicy | None = None,
        fallback: LocalAttemptFallback | None = None,
    ) -> None:
        self.store = store
        self.user_repo = user_repo
        self.notifier = notifier
        self.policy = policy or LockoutPolicy.from_settings()
        self.fallback = fallback or LocalAttemptFallback(self.policy)

    async def is_blocked(self, identity: str) -> bool:
        key = normalize_identity(identity)
        try:
            return await self.store.has_key(lockout_key(key))
        except StoreUnavailableError as e:
            logger.warning("Store unavailable for is_blocked (%s); using local lockouts", e.reason)
            return self.fallback.is_blocked(key)

    async def get_remaining_lockout_time(self, identity: str) -> int:
        """Seconds until the lockout expires; 0 when not locked."""
        key = normalize_identity(identity)
        try:
            remaining = await self.store.get_expire(lockout_key(key))
        except StoreUnavailableError:
            return self.fallback.remaining_lockout_seconds(key)
        return remaining or 0

    async def ensure_not_blocked(self, identity: str) -> None:
        """Raise AccountLockedException (remaining minutes, rounded up) if locked."""
        if not await self.is_blocked(identity):
            return
        remaining = await self.get_remaining_lockout_time(identity)
        raise AccountLockedException(remaining // 60 + 1)

    @traced("login.record_failed_attempt")
    async def record_failed_attempt(self, identity: str, client_ip: str | None = None) -> int:
        """Count one failed login; lock the account at the threshold.

        Returns:
            The failure count, or 1 when the store is unavailable.
        """
        key = normalize_identity(identity)
        attempt_key = login_attempt_key(key)
        try:
            attempts = await self.store.increment(attempt_key)
            if attempts == 1:
                await self.store.expire(attempt_key, self.policy.attempt_window)
            lockout = None
            if attempts >= self.policy.max_attempts:
                lockout = self.policy.lockout_duration(attempts)
                await self.store.set(lockout_key(key), str(attempts), lockout)
                logger.warning(
                    "Account locked for %s after %s failed attempts (IP: %s)",
                    lockout,
                    attempts,
                    anonymize_ip(client_ip),
                )
            self.fallback.mirror(key, attempts, lockout)
        except StoreUnavailableError as e:
            local = self.fallback.record_failure(key)
            logger.warning(
                "Store unavailable for record_failed_attempt (%s); local count=%s",
                e.reason,
                local,
            )
            return 1
        if lockout is not None:
            await self._notify_lockout_once(key, attempts, lockout, client_ip)
        return attempts

    async def _notify_lockout_once(
        self,
        identity: str,
        attempts: int,
        lockout: timedelta,
        client_ip: str | None,
    ) -> None:
        """Send at most one lockout email per lockout episode. Never raises."""
        if self.notifier is None or self.user_repo is None:
            return
        first = await or_else(
            self.store.set_if_absent(lockout_notified_key(identity), "1", lockout),
            False,
            operation="login.lockout_notified",
        )
        if not first:
            return
        try:
            user = await self.user_repo.get_user_by_email(identity)
            if user is None:
                logger.info("Lockout notification skipped: no account for identity")
                return
            await self.notifier.send_account_lockout_notification(
                user.email,
                user.name,
                attempts,
                int(lockout.total_seconds() // 60),
                client_ip,
            )
        except Exception as e:
            logger.warning("Failed to send lockout notification: %s", e)

    async def get_failed_attempts(self, identity: str) -> int:
        key = normalize_identity(identity)
        try:
            raw = await self.store.get(login_attempt_key(key))
        except StoreUnavailableError:
            return self.fallback.failed_attempts(key)
        return int(raw) if raw else 0

    async def get_remaining_attempts(self, identity: str) -> int:
        return max(0, self.policy.max_attempts - await self.get_failed_attempts(identity))

    async def clear_failed_attempts(self, identity: str) -> None:
        """Forget failures and lift the lockout (after a successful login)."""
        key = normalize_identity(identity)
        self.fallback.clear(key)
        await or_else(
            self.store.delete(login_attempt_key(key), lockout_key(key)),
            0,
            operation="login.clear_failed_attempts",
        )
