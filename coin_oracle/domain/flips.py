"""Flip history, stats and coin settings: read-through caching over the live storage.

Reads check the response cache and fall back to storage on a miss. Writes go
to storage first and then invalidate whatever cached value they change.
Storage errors propagate and nothing is cached for them.
"""

from __future__ import annotations

import random

from coin_oracle.infra.cache import ResponseCaches
from coin_oracle.models.flip import (
    CoinSettings,
    CoinSettingsUpdate,
    FlipCreate,
    FlipRecord,
    FlipStats,
    Outcome,
)
from coin_oracle.modules.suggestion.service import get_ai_suggestion
from coin_oracle.storage.base import Storage

HISTORY_KEY = "all"
STATS_KEY = "all"
SETTINGS_KEY = "current"


def flip_coin() -> Outcome:
    return random.choice(("heads", "tails"))


async def get_history(storage: Storage, caches: ResponseCaches) -> list[FlipRecord]:
    cached = caches.history.get(HISTORY_KEY)
    if cached is not None:
        return cached
    history = await storage.get_all_flip_history()
    caches.history.set(HISTORY_KEY, history)
    return history


async def get_stats(storage: Storage, caches: ResponseCaches) -> FlipStats:
    cached = caches.stats.get(STATS_KEY)
    if cached is not None:
        return cached
    stats = await storage.get_flip_stats()
    caches.stats.set(STATS_KEY, stats)
    return stats


async def record_flip(storage: Storage, caches: ResponseCaches, flip: FlipCreate) -> FlipRecord:
    """Attach a suggestion when the flip has a context, then persist it."""
    if flip.context:
        flip = flip.model_copy(update={
            "ai_suggestion": await get_ai_suggestion(
                flip.outcome, flip.context, flip.heads_label, flip.tails_label
            ),
        })
    record = await storage.add_flip_to_history(flip)
    caches.invalidate_flips()
    return record


async def clear_history(storage: Storage, caches: ResponseCaches) -> None:
    await storage.clear_flip_history()
    caches.invalidate_flips()


async def get_settings(storage: Storage, caches: ResponseCaches) -> CoinSettings:
    cached = caches.settings.get(SETTINGS_KEY)
    if cached is not None:
        return cached
    coin_settings = await storage.get_coin_settings()
    caches.settings.set(SETTINGS_KEY, coin_settings)
    return coin_settings


async def update_settings(
    storage: Storage, caches: ResponseCaches, partial: CoinSettingsUpdate
) -> CoinSettings:
    updated = await storage.update_coin_settings(partial)
    caches.settings.invalidate_all()
    return updated
