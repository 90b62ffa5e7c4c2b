"""Suggestion cache: avoids repeat LLM calls for the same flip question."""

from __future__ import annotations

import time
from collections import OrderedDict
from typing import Callable


def normalize_context(context: str) -> str:
    return context.strip().lower()


class SuggestionCache:
    """TTL cache for generated suggestions with a FIFO entry cap.

    When full, inserting a new key evicts the oldest-inserted entry
    (insertion order, not recency). Overwriting a key keeps its slot.
    """

    def __init__(
        self,
        ttl: float = 3600,
        max_entries: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._entries: OrderedDict[str, tuple[str, float]] = OrderedDict()
        self._ttl = ttl
        self._max_entries = max_entries
        self._clock = clock

    @staticmethod
    def make_key(outcome: str, context: str, heads_label: str, tails_label: str) -> str:
        return f"{outcome}:{normalize_context(context)}:{heads_label}:{tails_label}"

    def get(self, outcome: str, context: str, heads_label: str, tails_label: str) -> str | None:
        key = self.make_key(outcome, context, heads_label, tails_label)
        entry = self._entries.get(key)
        if entry is None:
            return None
        suggestion, expires_at = entry
        if self._clock() > expires_at:
            del self._entries[key]
            return None
        return suggestion

    def set(
        self, outcome: str, context: str, heads_label: str, tails_label: str, suggestion: str
    ) -> None:
        key = self.make_key(outcome, context, heads_label, tails_label)
        if key not in self._entries and len(self._entries) >= self._max_entries:
            self._entries.popitem(last=False)
        self._entries[key] = (suggestion, self._clock() + self._ttl)

    def lookup(self, outcome: str, context: str, heads_label: str, tails_label: str) -> str | None:
        """Exact hit first, then the same question with upper-cased labels."""
        hit = self.get(outcome, context, heads_label, tails_label)
        if hit is not None:
            return hit
        return self.get(outcome, context, heads_label.upper(), tails_label.upper())

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
