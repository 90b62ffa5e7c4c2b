"""SQLAlchemy async engine, session factory and schema bootstrap."""

from __future__ import annotations

import logging

from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from coin_oracle.infra.config import settings
from coin_oracle.models.db_models import Base, CoinSettings
from coin_oracle.models.flip import (
    DEFAULT_COIN_STYLE,
    DEFAULT_HEADS_LABEL,
    DEFAULT_TAILS_LABEL,
)

logger = logging.getLogger("coin-oracle.db")


def build_engine(database_url: str) -> AsyncEngine:
    """Create the async engine. Pool limits apply to server databases only."""
    kwargs: dict = {"echo": settings.db_echo, "future": True}
    if not database_url.startswith("sqlite"):
        kwargs.update(
            pool_size=settings.db_pool_size,
            pool_timeout=settings.db_pool_timeout_seconds,
            pool_recycle=settings.db_pool_recycle_seconds,
            connect_args={"timeout": settings.db_connect_timeout_seconds},
        )
    return create_async_engine(database_url, **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def ensure_tables_exist(engine: AsyncEngine) -> None:
    """Create missing tables and seed the default coin settings row if the table is empty."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        count = (await conn.execute(select(func.count()).select_from(CoinSettings))).scalar_one()
        if count == 0:
            await conn.execute(
                CoinSettings.__table__.insert().values(
                    heads_label=DEFAULT_HEADS_LABEL,
                    tails_label=DEFAULT_TAILS_LABEL,
                    coin_style=DEFAULT_COIN_STYLE,
                )
            )
            logger.info("Inserted default coin settings row.")


async def initialize_database(engine: AsyncEngine) -> bool:
    """Check connectivity and bootstrap the schema.

    Returns False instead of raising so the caller can fall back to
    in-memory storage.
    """
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        await ensure_tables_exist(engine)
    except Exception:
        logger.warning("Database initialization failed.", exc_info=True)
        return False
    return True
