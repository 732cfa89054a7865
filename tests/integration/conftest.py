"""Fixtures shared by the Postgres integration tests."""

from collections.abc import Awaitable, Callable

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.persistence.models.user import User
from app.infrastructure.security.password import get_password_hash
from app.shared.utils.generators import generate_cuid

PASSWORD = "correct horse battery staple"


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Insert a user with a unique email and PASSWORD as password."""

    async def _make(is_active: bool = True, email: str | None = None) -> User:
        user = User(
            email=email or f"user-{generate_cuid()}@blog.dev",
            name="Ada",
            hashed_password=get_password_hash(PASSWORD),
            role="AUTHOR",
            is_active=is_active,
        )
        db_session.add(user)
        await db_session.flush()
        return user

    return _make
