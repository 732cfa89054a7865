"""RefreshTokenRepository integration tests.

Require Postgres; session is rolled back after each test.
"""

from datetime import timedelta

import pytest

from app.application.services.refresh_token_service import RefreshTokenService, hash_token
from app.domain.exceptions import RefreshTokenReuseException
from app.infrastructure.persistence.repositories.refresh_token_repo import RefreshTokenRepository
from app.shared.utils.datetime import utc_now


@pytest.mark.requires_db
async def test_create_and_lookup_by_hash(db_session, make_user) -> None:
    """Stored row is found by its hash and carries timezone-aware timestamps."""
    user = await make_user()
    repo = RefreshTokenRepository(db_session)
    created = await repo.create_token(user.id, hash_token("plain-a"), utc_now() + timedelta(days=7))

    found = await repo.get_by_token_hash(hash_token("plain-a"))
    assert found is not None
    assert found.id == created.id
    assert found.user_id == user.id
    assert found.revoked is False
    assert found.expires_at.tzinfo is not None
    assert await repo.get_by_token_hash(hash_token("plain-b")) is None


@pytest.mark.requires_db
async def test_mark_revoked_succeeds_once(db_session, make_user) -> None:
    """Only the first revoke of a live row reports success."""
    user = await make_user()
    repo = RefreshTokenRepository(db_session)
    record = await repo.create_token(user.id, hash_token("once"), utc_now() + timedelta(days=7))

    assert await repo.mark_revoked(record.id) is True
    assert await repo.mark_revoked(record.id) is False
    assert await repo.mark_revoked("missing-id") is False
    assert (await repo.get_by_token_hash(hash_token("once"))).revoked is True


@pytest.mark.requires_db
async def test_revoke_all_for_user_counts_live_rows_only(db_session, make_user) -> None:
    """Already revoked rows and other users' rows are not counted."""
    owner = await make_user()
    other = await make_user()
    repo = RefreshTokenRepository(db_session)
    expires = utc_now() + timedelta(days=7)
    first = await repo.create_token(owner.id, hash_token("o-1"), expires)
    await repo.create_token(owner.id, hash_token("o-2"), expires)
    await repo.create_token(owner.id, hash_token("o-3"), expires)
    await repo.create_token(other.id, hash_token("x-1"), expires)
    await repo.mark_revoked(first.id)

    assert await repo.revoke_all_for_user(owner.id) == 2
    assert await repo.revoke_all_for_user(owner.id) == 0
    assert (await repo.get_by_token_hash(hash_token("x-1"))).revoked is False


@pytest.mark.requires_db
async def test_delete_expired_keeps_live_revoked_rows(db_session, make_user) -> None:
    """Expired rows go; a revoked but unexpired row stays for reuse detection."""
    user = await make_user()
    repo = RefreshTokenRepository(db_session)
    now = utc_now()
    await repo.create_token(user.id, hash_token("old"), now - timedelta(minutes=1))
    revoked = await repo.create_token(user.id, hash_token("revoked"), now + timedelta(days=1))
    await repo.mark_revoked(revoked.id)

    assert await repo.delete_expired(now) >= 1
    assert await repo.get_by_token_hash(hash_token("old")) is None
    assert await repo.get_by_token_hash(hash_token("revoked")) is not None


@pytest.mark.requires_db
async def test_rotation_and_reuse_against_database(db_session, make_user) -> None:
    """Rotating through the real repository, then replaying, revokes the chain."""
    user = await make_user()
    service = RefreshTokenService(RefreshTokenRepository(db_session), lifetime=timedelta(days=7))
    original = await service.create_refresh_token(user.id)
    rotated = await service.verify_and_rotate(original.token)

    with pytest.raises(RefreshTokenReuseException):
        await service.verify_and_rotate(original.token)
    assert await service.find_active(rotated.token) is None
