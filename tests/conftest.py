"""Pytest configuration and fixtures for inkwell.

Environment is set before app.main is imported: the module-level app
validates settings on import. HTTP tests run against app.main:app through
httpx's ASGITransport (lifespan not run), with the key-value store
overridden by an in-memory double. Tests marked requires_db use the
real session factory and are skipped unless DATABASE_URL points at a
migrated Postgres.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("DATABASE_URL", "")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from app.api.v1.dependencies import get_store  # noqa: E402
from app.core.config import get_settings  # noqa: E402
from app.core.limiter import limiter  # noqa: E402
from app.infrastructure.persistence import database  # noqa: E402
from app.infrastructure.security.jwt import create_access_token  # noqa: E402
from app.main import app  # noqa: E402
from tests.fakes import FakeClock, InMemoryStore  # noqa: E402

get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _reset_rate_limits() -> None:
    """SlowAPI keeps in-memory counters per process; start each test clean."""
    limiter.reset()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> InMemoryStore:
    """In-memory key-value store sharing the test clock."""
    return InMemoryStore(clock)


@pytest.fixture
async def client(store: InMemoryStore) -> AsyncClient:
    """Async HTTP client against the FastAPI app, store overridden in memory."""
    app.dependency_overrides[get_store] = lambda: store
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> dict[str, str]:
    token = create_access_token("admin-1", email="admin@example.com", role="ADMIN")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def viewer_headers() -> dict[str, str]:
    token = create_access_token("viewer-1", email="viewer@example.com", role="VIEWER")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def db_session():
    """AsyncSession against the configured database, rolled back after the test."""
    database._ensure_engine()
    if database.AsyncSessionLocal is None:
        pytest.skip("Postgres not configured: set DATABASE_URL and run alembic upgrade head")
    async with database.AsyncSessionLocal() as session:
        yield session
        await session.rollback()
