"""In-memory storage backend. Always available; used when no database is configured."""

from __future__ import annotations

from datetime import datetime, timezone

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


class MemoryStorage(Storage):
    kind = "memory"

    def __init__(self) -> None:
        self._users: dict[int, User] = {}
        self._flips: dict[int, FlipRecord] = {}
        self._payments: dict[str, bool] = {}
        self._settings: CoinSettings | None = CoinSettings(id=1, **default_settings_values())
        self._user_current_id = 1
        self._flip_current_id = 1

    # --- Users ---

    async def get_user(self, user_id: int) -> User | None:
        return self._users.get(user_id)

    async def get_user_by_username(self, username: str) -> User | None:
        return next((u for u in self._users.values() if u.username == username), None)

    async def create_user(self, user: UserCreate) -> User:
        user_id = self._user_current_id
        self._user_current_id += 1
        stored = User(id=user_id, username=user.username, password=user.password)
        self._users[user_id] = stored
        return stored

    # --- Flip history ---

    async def get_all_flip_history(self) -> list[FlipRecord]:
        return sorted(
            self._flips.values(),
            key=lambda f: (f.timestamp, f.id),
            reverse=True,
        )

    async def add_flip_to_history(self, flip: FlipCreate) -> FlipRecord:
        flip_id = self._flip_current_id
        self._flip_current_id += 1
        record = FlipRecord(
            id=flip_id,
            timestamp=datetime.now(timezone.utc),
            **flip_values(flip),
        )
        self._flips[flip_id] = record
        return record

    async def clear_flip_history(self) -> None:
        self._flips.clear()
        self._flip_current_id = 1

    async def get_flip_stats(self) -> FlipStats:
        heads = sum(1 for f in self._flips.values() if f.outcome == "heads")
        tails = sum(1 for f in self._flips.values() if f.outcome == "tails")
        return FlipStats(heads_count=heads, tails_count=tails, total_count=heads + tails)

    # --- Coin settings ---

    async def get_coin_settings(self) -> CoinSettings:
        if self._settings is None:
            self._settings = CoinSettings(id=1, **default_settings_values())
        return self._settings

    async def update_coin_settings(self, partial: CoinSettingsUpdate) -> CoinSettings:
        if self._settings is None:
            self._settings = CoinSettings(id=1, **default_settings_values(partial))
        else:
            self._settings = self._settings.model_copy(update=partial.changes())
        return self._settings

    # --- Payments ---

    async def get_payment_status(self, user_id: str) -> bool:
        return self._payments.get(user_id, False)

    async def set_payment_status(self, user_id: str, has_paid: bool) -> None:
        self._payments[user_id] = has_paid
