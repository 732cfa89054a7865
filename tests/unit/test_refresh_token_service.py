"""Unit tests for RefreshTokenService (rotation and reuse detection)."""

import asyncio
from datetime import timedelta

import pytest

from app.application.dtos.refresh_token import IssuedRefreshToken, RefreshTokenRecord
from app.application.services.refresh_token_service import RefreshTokenService, hash_token
from app.domain.exceptions import (
    RefreshTokenExpiredException,
    RefreshTokenReuseException,
    ResourceNotFoundException,
)
from app.shared.utils.datetime import utc_now
from tests.fakes import FakeRefreshTokenRepository

USER_ID = "1001"


@pytest.fixture
def repo() -> FakeRefreshTokenRepository:
    return FakeRefreshTokenRepository()


@pytest.fixture
def service(repo: FakeRefreshTokenRepository) -> RefreshTokenService:
    return RefreshTokenService(repo, lifetime=timedelta(days=7))


async def test_create_issues_opaque_token_and_stores_hash_only(
    service: RefreshTokenService, repo: FakeRefreshTokenRepository
) -> None:
    issued = await service.create_refresh_token(USER_ID)
    assert issued.user_id == USER_ID
    assert issued.revoked is False
    assert len(issued.token) > 20
    record = repo.records[issued.id]
    assert record.token_hash == hash_token(issued.token)
    assert record.token_hash != issued.token
    assert record.expires_at > utc_now() + timedelta(days=6)


async def test_create_revokes_previous_tokens(
    service: RefreshTokenService, repo: FakeRefreshTokenRepository
) -> None:
    first = await service.create_refresh_token(USER_ID)
    second = await service.create_refresh_token(USER_ID)
    assert repo.records[first.id].revoked
    assert not repo.records[second.id].revoked


async def test_rotate_consumes_token_and_issues_successor(
    service: RefreshTokenService, repo: FakeRefreshTokenRepository
) -> None:
    original = await service.create_refresh_token(USER_ID)
    rotated = await service.verify_and_rotate(original.token)

    assert rotated.token != original.token
    assert rotated.user_id == USER_ID
    assert not rotated.revoked
    assert repo.records[original.id].revoked
    assert await service.find_active(rotated.token) is not None
    assert await service.find_active(original.token) is None


async def test_reuse_of_rotated_token_revokes_whole_chain(
    service: RefreshTokenService, repo: FakeRefreshTokenRepository
) -> None:
    original = await service.create_refresh_token(USER_ID)
    rotated = await service.verify_and_rotate(original.token)

    with pytest.raises(RefreshTokenReuseException) as exc_info:
        await service.verify_and_rotate(original.token)
    assert exc_info.value.user_id == USER_ID
    assert repo.records[rotated.id].revoked
    assert await service.find_active(rotated.token) is None


async def test_reuse_leaves_other_users_untouched(
    service: RefreshTokenService, repo: FakeRefreshTokenRepository
) -> None:
    victim = await service.create_refresh_token(USER_ID)
    bystander = await service.create_refresh_token("2002")
    await service.verify_and_rotate(victim.token)
    with pytest.raises(RefreshTokenReuseException):
        await service.verify_and_rotate(victim.token)
    assert not repo.records[bystander.id].revoked


async def test_expired_token_rejected_without_side_effects(
    service: RefreshTokenService, repo: FakeRefreshTokenRepository
) -> None:
    issued = await service.create_refresh_token(USER_ID)
    repo.expire_now(issued.id)
    with pytest.raises(RefreshTokenExpiredException):
        await service.verify_and_rotate(issued.token)
    assert not repo.records[issued.id].revoked
    assert len(repo.records) == 1


async def test_unknown_token_not_found(service: RefreshTokenService) -> None:
    with pytest.raises(ResourceNotFoundException) as exc_info:
        await service.verify_and_rotate("not-a-real-token")
    assert exc_info.value.details["resource_type"] == "refresh_token"
    assert "not-a-real-token" not in exc_info.value.message


async def test_revoke_token_is_idempotent(
    service: RefreshTokenService, repo: FakeRefreshTokenRepository
) -> None:
    issued = await service.create_refresh_token(USER_ID)
    await service.revoke_token(issued.token)
    await service.revoke_token(issued.token)
    await service.revoke_token("unknown")
    assert repo.records[issued.id].revoked


async def test_revoke_all_user_tokens_counts_active(service: RefreshTokenService) -> None:
    await service.create_refresh_token(USER_ID)
    assert await service.revoke_all_user_tokens(USER_ID) == 1
    assert await service.revoke_all_user_tokens(USER_ID) == 0


async def test_cleanup_deletes_only_expired(
    service: RefreshTokenService, repo: FakeRefreshTokenRepository
) -> None:
    expired = await service.create_refresh_token(USER_ID)
    repo.expire_now(expired.id)
    live = await service.create_refresh_token("2002")
    assert await service.cleanup_expired_tokens() == 1
    assert list(repo.records) == [live.id]


class _InterleavingRepository(FakeRefreshTokenRepository):
    """Yields to the event loop between lookup and revoke, like a real round-trip."""

    async def get_by_token_hash(self, token_hash: str) -> RefreshTokenRecord | None:
        record = await super().get_by_token_hash(token_hash)
        await asyncio.sleep(0)
        return record


async def test_concurrent_redemption_succeeds_once() -> None:
    repo = _InterleavingRepository()
    service = RefreshTokenService(repo, lifetime=timedelta(days=7))
    issued = await service.create_refresh_token(USER_ID)

    results = await asyncio.gather(
        service.verify_and_rotate(issued.token),
        service.verify_and_rotate(issued.token),
        return_exceptions=True,
    )

    successes = [r for r in results if isinstance(r, IssuedRefreshToken)]
    reuses = [r for r in results if isinstance(r, RefreshTokenReuseException)]
    assert len(successes) == 1
    assert len(reuses) == 1
    # The loser is treated as reuse, so the winner's successor is revoked too.
    assert all(record.revoked for record in repo.records.values())
