"""Prompt templates for LLM calls."""

from __future__ import annotations

from string import Template

SUGGESTION_SYSTEM = "You are a helpful assistant for a coin flip app."

# --- Flip suggestion ---
FLIP_SUGGESTION = Template(
    "You are a helpful AI assistant for a coin flip decision-making app.\n\n"
    'The user flipped a coin for the following decision: "$context"\n\n'
    "The coin landed on: $landed_label.\n\n"
    "Please provide a brief, helpful suggestion or insight based on this result. "
    "Your response should be positive, playful, and around 2-3 sentences.\n\n"
    "Respond in this exact format (JSON):\n"
    '{"suggestion": "Your helpful advice or suggestion here."}'
)


def landed_label(outcome: str, heads_label: str, tails_label: str) -> str:
    return heads_label if outcome == "heads" else tails_label
