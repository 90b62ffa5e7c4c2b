"""In-memory TTL caches for API responses."""

from __future__ import annotations

import time
from typing import Callable, Generic, TypeVar

from fastapi import Request

from coin_oracle.infra.config import settings

T = TypeVar("T")


class MemoryCache(Generic[T]):
    """TTL-based in-memory cache backed by a dict.

    Expired entries are evicted lazily on ``get``; there is no background
    sweep and no capacity bound.
    """

    def __init__(self, default_ttl: float = 60, clock: Callable[[], float] = time.monotonic) -> None:
        self._store: dict[str, tuple[T, float]] = {}
        self._default_ttl = default_ttl
        self._clock = clock

    def get(self, key: str) -> T | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() > expires_at:
            del self._store[key]
            return None
        return value

    def set(self, key: str, value: T, ttl: float | None = None) -> None:
        ttl = ttl if ttl is not None else self._default_ttl
        self._store[key] = (value, self._clock() + ttl)

    def invalidate(self, key: str) -> None:
        self._store.pop(key, None)

    def invalidate_all(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)


class ResponseCaches:
    """The stats, history and settings caches shared by the flip routes."""

    def __init__(
        self,
        stats_ttl: float | None = None,
        history_ttl: float | None = None,
        settings_ttl: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.stats: MemoryCache = MemoryCache(
            stats_ttl if stats_ttl is not None else settings.stats_cache_ttl_seconds, clock
        )
        self.history: MemoryCache = MemoryCache(
            history_ttl if history_ttl is not None else settings.history_cache_ttl_seconds, clock
        )
        self.settings: MemoryCache = MemoryCache(
            settings_ttl if settings_ttl is not None else settings.settings_cache_ttl_seconds, clock
        )

    def invalidate_flips(self) -> None:
        """Drop everything derived from flip history."""
        self.history.invalidate_all()
        self.stats.invalidate_all()


def get_response_caches(request: Request) -> ResponseCaches:
    """FastAPI dependency that returns the app's response caches."""
    return request.app.state.response_caches
