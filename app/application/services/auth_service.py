"""Login, refresh and logout: credential checks wired to lockout and token rotation."""

from __future__ import annotations

import logging

from app.application.dtos.auth import TokenPair
from app.application.dtos.user import UserResult
from app.application.interfaces.repositories import IUserRepository
from app.application.services.login_attempt_service import LoginAttemptService
from app.application.services.refresh_token_service import RefreshTokenService
from app.core.config import get_settings
from app.domain.exceptions import AuthenticationException, InactiveAccountException
from app.infrastructure.security.jwt import create_access_token

logger = logging.getLogger(__name__)


class AuthService:
    """Authentication use cases (DIP: repositories and services injected)."""

    def __init__(
        self,
        user_repo: IUserRepository,
        login_attempts: LoginAttemptService,
        refresh_tokens: RefreshTokenService,
    ) -> None:
        self.user_repo = user_repo
        self.login_attempts = login_attempts
        self.refresh_tokens = refresh_tokens

    async def login(
        self, email: str, password: str, client_ip: str | None = None
    ) -> TokenPair:
        """Authenticate and issue an access + refresh token pair.

        Raises:
            AccountLockedException: Too many recent failures for this email.
            AuthenticationException: Wrong credentials (details carry the
                remaining attempts before lockout).
        """
        login_key = email.strip().lower()
        await self.login_attempts.ensure_not_blocked(login_key)

        user = await self.user_repo.authenticate(login_key, password)
        if user is None:
            await self.login_attempts.record_failed_attempt(login_key, client_ip)
            remaining = await self.login_attempts.get_remaining_attempts(login_key)
            if remaining > 0:
                raise AuthenticationException(
                    f"Invalid credentials. {remaining} attempt(s) remaining.",
                    {"remaining_attempts": remaining},
                )
            raise AuthenticationException(
                "Invalid credentials. Account locked after too many failed attempts.",
                {"remaining_attempts": 0},
            )

        await self.login_attempts.clear_failed_attempts(login_key)
        issued = await self.refresh_tokens.create_refresh_token(user.id)
        logger.info("User logged in: %s", user.id)
        return self._token_pair(user, issued.token)

    async def refresh(self, refresh_token: str) -> TokenPair:
        """Rotate the refresh token and issue a new access token.

        Raises:
            ResourceNotFoundException: Unknown refresh token.
            SecurityViolationException: Expired or reused refresh token.
            InactiveAccountException: Owner no longer exists or is inactive;
                the token is not rotated and all of the owner's tokens are revoked.
        """
        active = await self.refresh_tokens.find_active(refresh_token)
        if active is not None:
            await self._require_active_owner(active.user_id)
        issued = await self.refresh_tokens.verify_and_rotate(refresh_token)
        user = await self._require_active_owner(issued.user_id)
        return self._token_pair(user, issued.token)

    async def _require_active_owner(self, user_id: str) -> UserResult:
        user = await self.user_repo.get_user_by_id(user_id)
        if user is None or not user.is_active:
            await self.refresh_tokens.revoke_all_user_tokens(user_id)
            logger.warning("Refresh denied for missing or inactive user: %s", user_id)
            raise InactiveAccountException(user_id)
        return user

    async def logout(self, refresh_token: str) -> None:
        """Revoke the presented refresh token (idempotent)."""
        await self.refresh_tokens.revoke_token(refresh_token)

    @staticmethod
    def _token_pair(user: UserResult, refresh_token: str) -> TokenPair:
        settings = get_settings()
        access_token = create_access_token(user.id, email=user.email, role=user.role)
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=settings.access_token_expire_minutes * 60,
            email=user.email,
            name=user.name,
        )
