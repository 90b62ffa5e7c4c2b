"""Tests for backend selection, startup fallback and schema bootstrap."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import create_async_engine

from coin_oracle.infra.config import Settings
from coin_oracle.infra.db import ensure_tables_exist, initialize_database
from coin_oracle.models.db_models import CoinSettings
from coin_oracle.storage import DatabaseStorage, MemoryStorage, StorageManager, initialize_storage

UNREACHABLE_DB_URL = "sqlite+aiosqlite:////nonexistent-dir/coin-oracle/test.db"


async def _settings_rows(engine) -> int:
    async with engine.connect() as conn:
        return (await conn.execute(select(func.count()).select_from(CoinSettings))).scalar_one()


def test_no_database_url_selects_memory():
    manager = StorageManager("")
    assert manager.kind == "memory"
    assert isinstance(manager.storage, MemoryStorage)
    assert manager.database is None


async def test_database_url_selects_database(db_engine):
    manager = StorageManager("sqlite+aiosqlite:///:memory:", engine=db_engine)
    assert manager.kind == "database"
    assert isinstance(manager.storage, DatabaseStorage)


async def test_fallback_to_memory(db_engine):
    manager = StorageManager("sqlite+aiosqlite:///:memory:", engine=db_engine)
    manager.fallback_to_memory_storage()
    assert manager.kind == "memory"
    manager.fallback_to_memory_storage()
    assert manager.kind == "memory"


async def test_set_storage_implementation_switches_both_ways(db_engine):
    manager = StorageManager("sqlite+aiosqlite:///:memory:", engine=db_engine)
    manager.set_storage_implementation("memory")
    assert manager.storage is manager.memory
    manager.set_storage_implementation("database")
    assert manager.storage is manager.database


def test_database_refused_without_url():
    manager = StorageManager("")
    manager.set_storage_implementation("database")
    assert manager.kind == "memory"


def test_unknown_kind_rejected():
    with pytest.raises(ValueError):
        StorageManager("").set_storage_implementation("redis")


async def test_initialize_storage_uses_database_when_reachable(db_engine):
    manager = StorageManager("sqlite+aiosqlite:///:memory:", engine=db_engine)
    assert await initialize_storage(manager) == "database"
    assert manager.kind == "database"


async def test_initialize_storage_falls_back_when_unreachable():
    engine = create_async_engine(UNREACHABLE_DB_URL)
    manager = StorageManager(UNREACHABLE_DB_URL, engine=engine)
    try:
        assert await initialize_storage(manager) == "memory"
        assert manager.storage is manager.memory
    finally:
        await manager.dispose()


@pytest.mark.parametrize("url", [
    "sqlite:///./coin.db",
    "mysql://u:p@localhost/db",
    "not-a-database-url",
])
async def test_unbuildable_url_falls_back_to_memory(url):
    manager = StorageManager(url)
    assert manager.engine is None
    assert manager.database is None
    assert manager.kind == "memory"

    assert await initialize_storage(manager) == "memory"
    assert manager.storage is manager.memory
    await manager.dispose()


async def test_initialize_storage_without_database():
    manager = StorageManager("")
    assert await initialize_storage(manager) == "memory"


async def test_initialize_database_is_idempotent():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    try:
        assert await initialize_database(engine) is True
        assert await initialize_database(engine) is True
        await ensure_tables_exist(engine)
        assert await _settings_rows(engine) == 1
    finally:
        await engine.dispose()


async def test_initialize_database_reports_failure():
    engine = create_async_engine(UNREACHABLE_DB_URL)
    try:
        assert await initialize_database(engine) is False
    finally:
        await engine.dispose()


@pytest.mark.parametrize("raw, expected", [
    ("postgres://u:p@host/db", "postgresql+asyncpg://u:p@host/db"),
    ("postgresql://u:p@host/db", "postgresql+asyncpg://u:p@host/db"),
    ("postgresql+asyncpg://u:p@host/db", "postgresql+asyncpg://u:p@host/db"),
    ("sqlite+aiosqlite:///./coin.db", "sqlite+aiosqlite:///./coin.db"),
    ("", ""),
])
def test_async_database_url(raw, expected):
    assert Settings(database_url=raw).async_database_url == expected
