"""Storage selection: which backend serves requests, and the startup fallback."""

from __future__ import annotations

import logging

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine

from coin_oracle.infra.db import build_engine, build_session_factory, initialize_database
from coin_oracle.storage.base import Storage
from coin_oracle.storage.database import DatabaseStorage
from coin_oracle.storage.memory import MemoryStorage

logger = logging.getLogger("coin-oracle.storage")

STORAGE_KINDS = ("memory", "database")


class StorageManager:
    """Holds both backends and the pointer to the live one.

    Built once at startup. Only the startup sequence reconfigures it;
    request handlers just read ``storage``.
    """

    def __init__(
        self,
        database_url: str = "",
        engine: AsyncEngine | None = None,
        memory: MemoryStorage | None = None,
    ) -> None:
        self.database_url = database_url
        self.memory = memory or MemoryStorage()
        self.engine: AsyncEngine | None = engine
        if self.engine is None and database_url:
            try:
                self.engine = build_engine(database_url)
            except Exception:
                # Unknown dialect, missing driver or a sync-only driver.
                logger.warning(
                    "Cannot build a database engine; using in-memory storage.", exc_info=True
                )
        self.database: DatabaseStorage | None = (
            DatabaseStorage(build_session_factory(self.engine)) if self.engine is not None else None
        )
        self._current: Storage = self.database if self.database is not None else self.memory

    @property
    def storage(self) -> Storage:
        return self._current

    @property
    def kind(self) -> str:
        return self._current.kind

    def fallback_to_memory_storage(self) -> None:
        if self._current is not self.memory:
            logger.warning("Falling back to in-memory storage.")
        self._current = self.memory

    def set_storage_implementation(self, kind: str) -> None:
        if kind not in STORAGE_KINDS:
            raise ValueError(f"Unknown storage kind '{kind}'")
        if kind == "memory":
            self._current = self.memory
        elif self.database is None:
            logger.warning(
                "No usable database configured; keeping %s storage.", self._current.kind
            )
        else:
            self._current = self.database

    async def dispose(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()


def get_storage(request: Request) -> Storage:
    """FastAPI dependency that returns the live storage backend."""
    return request.app.state.storage_manager.storage


async def initialize_storage(manager: StorageManager) -> str:
    """Bootstrap the database (if any) and pick the live backend. Returns its kind."""
    if manager.engine is None:
        if manager.database_url:
            logger.warning("DATABASE_URL is unusable; using in-memory storage.")
        else:
            logger.info("No DATABASE_URL configured; using in-memory storage.")
        manager.set_storage_implementation("memory")
        return manager.kind

    if await initialize_database(manager.engine):
        manager.set_storage_implementation("database")
        logger.info("Database initialized; using database storage.")
    else:
        manager.fallback_to_memory_storage()
    return manager.kind
