"""Relational storage backend on SQLAlchemy's async ORM."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import case, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from coin_oracle.models import db_models
from coin_oracle.models.flip import (
    CoinSettings,
    CoinSettingsUpdate,
    FlipCreate,
    FlipRecord,
    FlipStats,
    User,
    UserCreate,
)
from coin_oracle.storage.base import Storage, default_settings_values, flip_values


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_record(row: db_models.FlipHistory) -> FlipRecord:
    record = FlipRecord.model_validate(row)
    record.timestamp = _as_utc(record.timestamp)
    return record


class DatabaseStorage(Storage):
    """Flips, settings and users live in the database; payment status stays in-process."""

    kind = "database"

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._payments: dict[str, bool] = {}

    # --- Users ---

    async def get_user(self, user_id: int) -> User | None:
        async with self._session_factory() as db:
            row = await db.get(db_models.User, user_id)
            return User.model_validate(row) if row is not None else None

    async def get_user_by_username(self, username: str) -> User | None:
        async with self._session_factory() as db:
            result = await db.execute(
                select(db_models.User).where(db_models.User.username == username)
            )
            row = result.scalar_one_or_none()
            return User.model_validate(row) if row is not None else None

    async def create_user(self, user: UserCreate) -> User:
        async with self._session_factory() as db:
            row = db_models.User(username=user.username, password=user.password)
            db.add(row)
            await db.commit()
            return User.model_validate(row)

    # --- Flip history ---

    async def get_all_flip_history(self) -> list[FlipRecord]:
        async with self._session_factory() as db:
            result = await db.execute(
                select(db_models.FlipHistory).order_by(
                    db_models.FlipHistory.timestamp.desc(),
                    db_models.FlipHistory.id.desc(),
                )
            )
            return [_to_record(row) for row in result.scalars().all()]

    async def add_flip_to_history(self, flip: FlipCreate) -> FlipRecord:
        async with self._session_factory() as db:
            row = db_models.FlipHistory(
                timestamp=datetime.now(timezone.utc),
                **flip_values(flip),
            )
            db.add(row)
            await db.commit()
            return _to_record(row)

    async def clear_flip_history(self) -> None:
        async with self._session_factory() as db:
            await db.execute(delete(db_models.FlipHistory))
            await db.commit()

    async def get_flip_stats(self) -> FlipStats:
        outcome = db_models.FlipHistory.outcome
        async with self._session_factory() as db:
            result = await db.execute(
                select(
                    func.coalesce(func.sum(case((outcome == "heads", 1), else_=0)), 0),
                    func.coalesce(func.sum(case((outcome == "tails", 1), else_=0)), 0),
                    func.count(),
                ).select_from(db_models.FlipHistory)
            )
            heads, tails, total = result.one()
            return FlipStats(
                heads_count=int(heads),
                tails_count=int(tails),
                total_count=int(total),
            )

    # --- Coin settings ---

    async def _first_settings_row(self, db: AsyncSession) -> db_models.CoinSettings | None:
        result = await db.execute(
            select(db_models.CoinSettings).order_by(db_models.CoinSettings.id).limit(1)
        )
        return result.scalar_one_or_none()

    async def get_coin_settings(self) -> CoinSettings:
        async with self._session_factory() as db:
            row = await self._first_settings_row(db)
            if row is None:
                row = db_models.CoinSettings(**default_settings_values())
                db.add(row)
                await db.commit()
            return CoinSettings.model_validate(row)

    async def update_coin_settings(self, partial: CoinSettingsUpdate) -> CoinSettings:
        async with self._session_factory() as db:
            row = await self._first_settings_row(db)
            if row is None:
                row = db_models.CoinSettings(**default_settings_values(partial))
                db.add(row)
            else:
                for field, value in partial.changes().items():
                    setattr(row, field, value)
            await db.commit()
            return CoinSettings.model_validate(row)

    # --- Payments ---

    async def get_payment_status(self, user_id: str) -> bool:
        return self._payments.get(user_id, False)

    async def set_payment_status(self, user_id: str, has_paid: bool) -> None:
        self._payments[user_id] = has_paid
