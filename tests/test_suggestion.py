"""Tests for the suggestion cache and the suggestion service."""

from unittest.mock import AsyncMock, patch

import pytest

from coin_oracle.modules.suggestion.cache import SuggestionCache
from coin_oracle.modules.suggestion.service import (
    FALLBACK_SUGGESTION,
    get_ai_suggestion,
    parse_suggestion,
)
from tests.conftest import FakeClock


class TestSuggestionCache:
    def test_context_is_normalized(self):
        cache = SuggestionCache()
        cache.set("heads", "should i go out", "HEADS", "TAILS", "Go for it!")
        assert cache.get("heads", "  SHOULD I GO OUT ", "HEADS", "TAILS") == "Go for it!"

    def test_key_includes_outcome_and_labels(self):
        cache = SuggestionCache()
        cache.set("heads", "pizza?", "YES", "NO", "Eat the pizza.")
        assert cache.get("tails", "pizza?", "YES", "NO") is None
        assert cache.get("heads", "pizza?", "NO", "YES") is None
        assert SuggestionCache.make_key("heads", " Pizza? ", "YES", "NO") == "heads:pizza?:YES:NO"

    def test_expired_entry_is_evicted(self):
        clock = FakeClock()
        cache = SuggestionCache(ttl=3600, clock=clock)
        cache.set("heads", "x", "HEADS", "TAILS", "s")
        clock.advance(3601)
        assert cache.get("heads", "x", "HEADS", "TAILS") is None
        assert len(cache) == 0

    def test_cap_evicts_oldest_inserted(self):
        cache = SuggestionCache(max_entries=2)
        cache.set("heads", "first", "H", "T", "1")
        cache.set("heads", "second", "H", "T", "2")
        # Reading "first" does not protect it: eviction is by insertion order.
        assert cache.get("heads", "first", "H", "T") == "1"
        cache.set("heads", "third", "H", "T", "3")

        assert len(cache) == 2
        assert cache.get("heads", "first", "H", "T") is None
        assert cache.get("heads", "second", "H", "T") == "2"
        assert cache.get("heads", "third", "H", "T") == "3"

    def test_overwrite_does_not_evict(self):
        cache = SuggestionCache(max_entries=2)
        cache.set("heads", "a", "H", "T", "1")
        cache.set("heads", "b", "H", "T", "2")
        cache.set("heads", "a", "H", "T", "1b")
        assert len(cache) == 2
        assert cache.get("heads", "a", "H", "T") == "1b"
        assert cache.get("heads", "b", "H", "T") == "2"

    def test_lookup_falls_back_to_uppercase_labels(self):
        cache = SuggestionCache()
        cache.set("tails", "take the job", "YES", "NO", "Stay put.")
        assert cache.lookup("tails", "Take the job", "yes", "no") == "Stay put."
        assert cache.lookup("tails", "Take the job", "maybe", "no") is None


class TestParseSuggestion:
    def test_json_reply(self):
        assert parse_suggestion('{"suggestion": " Go! "}') == "Go!"

    def test_plain_text_reply(self):
        assert parse_suggestion("Just go for it.\n") == "Just go for it."

    def test_empty_reply_raises(self):
        with pytest.raises(ValueError):
            parse_suggestion('{"suggestion": ""}')


class TestGetAISuggestion:
    async def test_miss_calls_llm_and_caches(self):
        cache = SuggestionCache()
        llm = AsyncMock(return_value='{"suggestion": "Go for it!"}')
        with patch("coin_oracle.modules.suggestion.service.ask_llm", llm):
            first = await get_ai_suggestion("heads", "Should I go out", cache=cache)
            second = await get_ai_suggestion("heads", "should i go out  ", cache=cache)

        assert first == second == "Go for it!"
        assert llm.await_count == 1
        prompt = llm.await_args.args[0]
        assert "Should I go out" in prompt
        assert "HEADS" in prompt

    async def test_prompt_uses_landed_label(self):
        llm = AsyncMock(return_value='{"suggestion": "ok"}')
        with patch("coin_oracle.modules.suggestion.service.ask_llm", llm):
            await get_ai_suggestion("tails", "tea?", "COFFEE", "TEA", cache=SuggestionCache())
        assert "The coin landed on: TEA." in llm.await_args.args[0]

    async def test_failure_returns_fallback_and_is_not_cached(self):
        cache = SuggestionCache()
        llm = AsyncMock(side_effect=RuntimeError("service down"))
        with patch("coin_oracle.modules.suggestion.service.ask_llm", llm):
            result = await get_ai_suggestion("tails", "move city?", cache=cache)

        assert result == FALLBACK_SUGGESTION
        assert len(cache) == 0

    async def test_cached_hit_skips_llm(self):
        cache = SuggestionCache()
        cache.set("heads", "gym", "HEADS", "TAILS", "Lift!")
        llm = AsyncMock()
        with patch("coin_oracle.modules.suggestion.service.ask_llm", llm):
            assert await get_ai_suggestion("heads", "GYM", cache=cache) == "Lift!"
        llm.assert_not_awaited()
