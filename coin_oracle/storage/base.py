"""Storage interface shared by the in-memory and relational backends."""

from __future__ import annotations

from abc import ABC, abstractmethod

from coin_oracle.models.flip import (
    DEFAULT_COIN_STYLE,
    DEFAULT_HEADS_LABEL,
    DEFAULT_TAILS_LABEL,
    CoinSettings,
    CoinSettingsUpdate,
    FlipCreate,
    FlipRecord,
    FlipStats,
    User,
    UserCreate,
)


def flip_values(flip: FlipCreate) -> dict:
    """Column values for a new flip, with empty fields replaced by their defaults."""
    return {
        "outcome": flip.outcome,
        "context": flip.context or None,
        "ai_suggestion": flip.ai_suggestion or None,
        "heads_label": flip.heads_label or DEFAULT_HEADS_LABEL,
        "tails_label": flip.tails_label or DEFAULT_TAILS_LABEL,
        "coin_style": flip.coin_style or DEFAULT_COIN_STYLE,
    }


def default_settings_values(partial: CoinSettingsUpdate | None = None) -> dict:
    values = {
        "heads_label": DEFAULT_HEADS_LABEL,
        "tails_label": DEFAULT_TAILS_LABEL,
        "coin_style": DEFAULT_COIN_STYLE,
    }
    if partial is not None:
        values.update(partial.changes())
    return values


class Storage(ABC):
    """Everything the request handlers persist, independent of backend.

    Payment status is kept in-process by every backend and does not survive
    a restart.
    """

    kind: str

    # --- Users ---

    @abstractmethod
    async def get_user(self, user_id: int) -> User | None:
        ...

    @abstractmethod
    async def get_user_by_username(self, username: str) -> User | None:
        ...

    @abstractmethod
    async def create_user(self, user: UserCreate) -> User:
        ...

    # --- Flip history ---

    @abstractmethod
    async def get_all_flip_history(self) -> list[FlipRecord]:
        """Return every flip, newest first."""

    @abstractmethod
    async def add_flip_to_history(self, flip: FlipCreate) -> FlipRecord:
        ...

    @abstractmethod
    async def clear_flip_history(self) -> None:
        ...

    @abstractmethod
    async def get_flip_stats(self) -> FlipStats:
        ...

    # --- Coin settings ---

    @abstractmethod
    async def get_coin_settings(self) -> CoinSettings:
        """Return the settings singleton, creating it with defaults if absent."""

    @abstractmethod
    async def update_coin_settings(self, partial: CoinSettingsUpdate) -> CoinSettings:
        """Merge the explicitly set fields of ``partial`` into the singleton."""

    # --- Payments ---

    @abstractmethod
    async def get_payment_status(self, user_id: str) -> bool:
        ...

    @abstractmethod
    async def set_payment_status(self, user_id: str, has_paid: bool) -> None:
        ...
