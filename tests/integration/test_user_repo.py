"""UserRepository integration tests.

Require Postgres; session is rolled back after each test.
"""

import pytest

from app.infrastructure.persistence.repositories.user_repo import UserRepository
from tests.integration.conftest import PASSWORD


@pytest.mark.requires_db
async def test_authenticate_returns_user_for_correct_password(db_session, make_user) -> None:
    """Correct credentials return the user DTO without the password hash."""
    user = await make_user()
    result = await UserRepository(db_session).authenticate(user.email, PASSWORD)
    assert result is not None
    assert result.id == user.id
    assert not hasattr(result, "hashed_password")


@pytest.mark.requires_db
async def test_authenticate_rejects_wrong_password(db_session, make_user) -> None:
    """Wrong password returns None."""
    user = await make_user()
    assert await UserRepository(db_session).authenticate(user.email, "wrong") is None


@pytest.mark.requires_db
async def test_authenticate_rejects_unknown_email(db_session) -> None:
    """Unknown email returns None after a dummy hash comparison."""
    result = await UserRepository(db_session).authenticate("nobody@blog.dev", PASSWORD)
    assert result is None


@pytest.mark.requires_db
async def test_authenticate_rejects_inactive_user(db_session, make_user) -> None:
    """Inactive users cannot authenticate even with the right password."""
    user = await make_user(is_active=False)
    assert await UserRepository(db_session).authenticate(user.email, PASSWORD) is None


@pytest.mark.requires_db
async def test_lookup_by_email_is_case_insensitive(db_session, make_user) -> None:
    """Emails are stored lowercase and looked up after normalisation."""
    user = await make_user()
    repo = UserRepository(db_session)
    found = await repo.get_user_by_email(f"  {user.email.upper()} ")
    assert found is not None
    assert found.id == user.id
    assert (await repo.get_user_by_id(user.id)).email == user.email
    assert await repo.get_user_by_id("missing-id") is None
