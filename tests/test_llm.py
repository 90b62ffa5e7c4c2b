"""Tests for LLM provider selection."""

from coin_oracle.infra.config import settings
from coin_oracle.modules.llm.client import (
    AnthropicProvider,
    MockProvider,
    OpenAIProvider,
    get_llm_provider,
)


def test_mock_provider(monkeypatch):
    monkeypatch.setattr(settings, "llm_provider", "mock")
    assert isinstance(get_llm_provider(), MockProvider)


def test_anthropic_gets_its_own_default_model(monkeypatch):
    monkeypatch.setattr(settings, "llm_provider", "anthropic")
    monkeypatch.setattr(settings, "llm_model", "")
    provider = get_llm_provider()
    assert isinstance(provider, AnthropicProvider)
    assert provider.model.startswith("claude-")


def test_openai_gets_its_own_default_model(monkeypatch):
    monkeypatch.setattr(settings, "llm_provider", "OpenAI")
    monkeypatch.setattr(settings, "llm_model", "")
    provider = get_llm_provider()
    assert isinstance(provider, OpenAIProvider)
    assert provider.model == "gpt-4o"


def test_explicit_model_wins(monkeypatch):
    monkeypatch.setattr(settings, "llm_provider", "anthropic")
    monkeypatch.setattr(settings, "llm_model", "claude-haiku-4-5")
    assert get_llm_provider().model == "claude-haiku-4-5"
