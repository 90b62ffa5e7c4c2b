"""Shared test fixtures."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

from coin_oracle.infra.cache import ResponseCaches, get_response_caches
from coin_oracle.infra.db import build_session_factory, ensure_tables_exist
from coin_oracle.main import app
from coin_oracle.models.db_models import Base
from coin_oracle.modules.suggestion.service import suggestion_cache
from coin_oracle.storage import DatabaseStorage, MemoryStorage
from coin_oracle.storage.manager import get_storage

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(autouse=True)
def _clear_suggestion_cache():
    suggestion_cache.clear()
    yield
    suggestion_cache.clear()


@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine(TEST_DB_URL, echo=False)
    await ensure_tables_exist(engine)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_storage(db_engine):
    return DatabaseStorage(build_session_factory(db_engine))


@pytest.fixture
def memory_storage():
    return MemoryStorage()


@pytest_asyncio.fixture(params=["memory", "database"])
async def storage(request, db_engine):
    """Runs the test once against each backend."""
    if request.param == "memory":
        return MemoryStorage()
    return DatabaseStorage(build_session_factory(db_engine))


@pytest.fixture
def caches():
    return ResponseCaches()


@pytest_asyncio.fixture
async def client(storage, caches):
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_response_caches] = lambda: caches
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


async def register_user(
    client: AsyncClient,
    username: str = "TestUser",
    password: str = "s3cret-pass",
) -> dict:
    """Register a user and return dict with user_id, access_token, headers."""
    resp = await client.post("/api/auth/register", json={
        "username": username,
        "password": password,
    })
    assert resp.status_code == 200
    data = resp.json()
    return {
        "user_id": data["user_id"],
        "access_token": data["access_token"],
        "headers": {"Authorization": f"Bearer {data['access_token']}"},
    }


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
