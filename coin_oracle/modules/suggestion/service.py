"""AI suggestions for flip outcomes, served from cache when possible."""

from __future__ import annotations

import json
import logging

from coin_oracle.infra.config import settings
from coin_oracle.modules.llm.client import ask_llm
from coin_oracle.modules.llm.prompts import FLIP_SUGGESTION, SUGGESTION_SYSTEM, landed_label
from coin_oracle.modules.suggestion.cache import SuggestionCache

logger = logging.getLogger("coin-oracle.suggestion")

FALLBACK_SUGGESTION = (
    "I couldn't generate a suggestion right now. "
    "Trust your intuition based on the coin flip result!"
)

suggestion_cache = SuggestionCache(
    ttl=settings.suggestion_cache_ttl_seconds,
    max_entries=settings.suggestion_cache_max_entries,
)


def parse_suggestion(content: str) -> str:
    """Pull the suggestion out of a ``{"suggestion": ...}`` reply, or use the raw text."""
    try:
        data = json.loads(content)
    except ValueError:
        data = None
    if isinstance(data, dict):
        suggestion = str(data.get("suggestion") or "").strip()
    else:
        suggestion = content.strip()
    if not suggestion:
        raise ValueError("LLM returned an empty suggestion")
    return suggestion


async def get_ai_suggestion(
    outcome: str,
    context: str,
    heads_label: str = "HEADS",
    tails_label: str = "TAILS",
    cache: SuggestionCache | None = None,
) -> str:
    """Return a suggestion for the flip. Never raises; failures yield FALLBACK_SUGGESTION."""
    cache = cache if cache is not None else suggestion_cache

    cached = cache.lookup(outcome, context, heads_label, tails_label)
    if cached is not None:
        return cached

    prompt = FLIP_SUGGESTION.substitute(
        context=context,
        landed_label=landed_label(outcome, heads_label, tails_label),
    )
    try:
        content = await ask_llm(
            prompt,
            SUGGESTION_SYSTEM,
            temperature=0.7,
            max_tokens=150,
            json_mode=True,
        )
        suggestion = parse_suggestion(content)
    except Exception:
        logger.error("Error getting AI suggestion for outcome=%s", outcome, exc_info=True)
        return FALLBACK_SUGGESTION

    cache.set(outcome, context, heads_label, tails_label, suggestion)
    return suggestion
