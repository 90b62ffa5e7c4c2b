"""LLM provider abstraction: supports OpenAI-compatible, Anthropic, and Mock."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod

import httpx

from coin_oracle.infra.config import settings


def _client() -> httpx.AsyncClient:
    # Transport-level retries cover connection failures only.
    return httpx.AsyncClient(
        timeout=settings.llm_timeout_seconds,
        transport=httpx.AsyncHTTPTransport(retries=settings.llm_max_retries),
    )


class LLMProvider(ABC):
    @abstractmethod
    async def generate(self, prompt: str, system: str | None = None, **kwargs: object) -> str:
        ...


class OpenAIProvider(LLMProvider):
    """OpenAI-compatible API provider (works with any OpenAI-compatible endpoint)."""

    default_model = "gpt-4o"

    def __init__(self, api_key: str, base_url: str, model: str = "") -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model or self.default_model

    async def generate(self, prompt: str, system: str | None = None, **kwargs: object) -> str:
        messages: list[dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        json_mode = kwargs.pop("json_mode", False)
        body: dict = {"model": self.model, "messages": messages, **kwargs}
        if json_mode:
            body["response_format"] = {"type": "json_object"}

        async with _client() as client:
            resp = await client.post(
                f"{self.base_url}/chat/completions",
                headers={"Authorization": f"Bearer {self.api_key}"},
                json=body,
            )
            resp.raise_for_status()
            return resp.json()["choices"][0]["message"]["content"]


class AnthropicProvider(LLMProvider):
    """Anthropic Messages API provider. It has no JSON mode; prompts ask for JSON themselves."""

    default_model = "claude-sonnet-4-5-20250929"

    def __init__(self, api_key: str, model: str = "") -> None:
        self.api_key = api_key
        self.model = model or self.default_model

    async def generate(self, prompt: str, system: str | None = None, **kwargs: object) -> str:
        kwargs.pop("json_mode", None)
        body: dict = {
            "model": self.model,
            "max_tokens": kwargs.pop("max_tokens", 1024),  # type: ignore[arg-type]
            "messages": [{"role": "user", "content": prompt}],
        }
        if "temperature" in kwargs:
            body["temperature"] = kwargs["temperature"]
        if system:
            body["system"] = system

        async with _client() as client:
            resp = await client.post(
                "https://api.anthropic.com/v1/messages",
                headers={
                    "x-api-key": self.api_key,
                    "anthropic-version": "2023-06-01",
                    "content-type": "application/json",
                },
                json=body,
            )
            resp.raise_for_status()
            return resp.json()["content"][0]["text"]


class MockProvider(LLMProvider):
    """Returns canned responses for testing."""

    async def generate(self, prompt: str, system: str | None = None, **kwargs: object) -> str:
        return json.dumps({
            "suggestion": "The coin has spoken! Give it a go and see how it feels.",
        })


def get_llm_provider() -> LLMProvider:
    """Factory: return the configured LLM provider."""
    provider_name = settings.llm_provider.lower()
    if provider_name == "openai":
        return OpenAIProvider(
            api_key=settings.llm_api_key,
            base_url=settings.llm_base_url,
            model=settings.llm_model,
        )
    elif provider_name == "anthropic":
        return AnthropicProvider(
            api_key=settings.llm_api_key,
            model=settings.llm_model,
        )
    else:
        return MockProvider()


# Module-level singleton, initialized lazily
_provider: LLMProvider | None = None


def _get_provider() -> LLMProvider:
    global _provider
    if _provider is None:
        _provider = get_llm_provider()
    return _provider


async def ask_llm(prompt: str, system: str | None = None, **kwargs: object) -> str:
    """Unified entry point for LLM calls."""
    return await _get_provider().generate(prompt, system, **kwargs)
