"""Concurrent model listing across configured LLM providers."""

from __future__ import annotations

import logging
import os
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, Literal

import anyio
import httpx
from pydantic import BaseModel, Field

from grimoire.config import get_config_value
from grimoire.errors import ConfigError, ProviderError

logger = logging.getLogger(__name__)

ProviderKind = Literal["openai", "anthropic", "ollama", "openrouter"]

DEFAULT_BASE_URLS: dict[str, str] = {
    "openai": "https://api.openai.com/v1",
    "anthropic": "https://api.anthropic.com/v1",
    "ollama": "http://localhost:11434",
    "openrouter": "https://openrouter.ai/api/v1",
}
DEFAULT_API_KEY_ENV: dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "openrouter": "OPENROUTER_API_KEY",
}
# Concurrent requests per provider; None means unlimited.
DEFAULT_LIMITS: dict[str, int | None] = {
    "openai": 60,
    "anthropic": 60,
    "openrouter": 60,
    "ollama": None,
}
ANTHROPIC_VERSION = "2023-06-01"


@dataclass(frozen=True)
class ProviderConfig:
    """A configured LLM provider."""

    name: str
    kind: ProviderKind
    base_url: str | None = None
    api_key: str | None = None

    @property
    def url(self) -> str:
        return (self.base_url or DEFAULT_BASE_URLS[self.kind]).rstrip("/")


class ProviderModels(BaseModel):
    """Models reported by one provider."""

    provider: str
    models: list[str] = Field(default_factory=list)


class RateLimitStatus(BaseModel):
    """Current throttling state for a provider key."""

    is_limited: bool
    retry_after_seconds: float | None = None
    limit: int | None = None


class RateLimiter:
    """One counting semaphore per provider key, plus retry-after deadlines.

    Use ``async with limiter.limit(key)`` so the permit is always released.
    """

    def __init__(self, limits: dict[str, int | None] | None = None) -> None:
        self.limits = dict(DEFAULT_LIMITS if limits is None else limits)
        self._semaphores: dict[str, anyio.Semaphore] = {}
        self._retry_after: dict[str, float] = {}

    def _limit_for(self, key: str) -> int | None:
        return self.limits.get(key, 60)

    def _semaphore(self, key: str) -> anyio.Semaphore | None:
        limit = self._limit_for(key)
        if limit is None:
            return None
        if key not in self._semaphores:
            self._semaphores[key] = anyio.Semaphore(limit)
        return self._semaphores[key]

    async def acquire(self, key: str) -> None:
        """Wait out any retry-after deadline, then take a permit."""
        deadline = self._retry_after.get(key)
        if deadline is not None:
            delay = deadline - time.monotonic()
            if delay > 0:
                logger.info(f"Rate limited by {key}; waiting {delay:.1f}s")
                await anyio.sleep(delay)
            self._retry_after.pop(key, None)

        semaphore = self._semaphore(key)
        if semaphore is not None:
            await semaphore.acquire()

    def release(self, key: str) -> None:
        semaphore = self._semaphores.get(key)
        if semaphore is not None:
            semaphore.release()

    def set_retry_after(self, key: str, seconds: float) -> None:
        self._retry_after[key] = time.monotonic() + seconds

    def get_status(self, key: str) -> RateLimitStatus:
        deadline = self._retry_after.get(key)
        remaining = deadline - time.monotonic() if deadline is not None else None
        limited = remaining is not None and remaining > 0
        return RateLimitStatus(
            is_limited=limited,
            retry_after_seconds=remaining if limited else None,
            limit=self._limit_for(key),
        )

    @asynccontextmanager
    async def limit(self, key: str) -> AsyncIterator[None]:
        await self.acquire(key)
        try:
            yield
        finally:
            self.release(key)


def _request_for(provider: ProviderConfig) -> tuple[str, dict[str, str]]:
    headers: dict[str, str] = {}
    if provider.kind == "ollama":
        return f"{provider.url}/api/tags", headers
    if provider.kind == "anthropic":
        if provider.api_key:
            headers["x-api-key"] = provider.api_key
        headers["anthropic-version"] = ANTHROPIC_VERSION
    elif provider.api_key:
        headers["Authorization"] = f"Bearer {provider.api_key}"
    return f"{provider.url}/models", headers


def _parse_models(provider: ProviderConfig, data: Any) -> list[str]:
    if not isinstance(data, dict):
        raise ProviderError(f"{provider.name}: unexpected response shape")
    if provider.kind == "ollama":
        return [str(model["name"]) for model in data.get("models", []) if "name" in model]
    return [str(model["id"]) for model in data.get("data", []) if "id" in model]


async def fetch_models(
    client: httpx.AsyncClient, provider: ProviderConfig, limiter: RateLimiter
) -> list[str]:
    """
    Fetch the model ids offered by one provider.

    Raises:
        ProviderError: On HTTP errors, rate limiting, or malformed responses.
    """
    url, headers = _request_for(provider)
    async with limiter.limit(provider.kind):
        try:
            response = await client.get(url, headers=headers)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 429:
                retry_after = e.response.headers.get("retry-after")
                if retry_after and retry_after.isdigit():
                    limiter.set_retry_after(provider.kind, float(retry_after))
                raise ProviderError(f"{provider.name}: rate limit exceeded") from e
            if status == 401:
                raise ProviderError(f"{provider.name}: authentication failed") from e
            raise ProviderError(f"{provider.name}: API error ({status})") from e
        except httpx.RequestError as e:
            raise ProviderError(f"{provider.name}: request failed: {e!s}") from e
        except ValueError as e:
            raise ProviderError(f"{provider.name}: invalid JSON response") from e

    return _parse_models(provider, data)


async def list_models(
    providers: list[ProviderConfig],
    client: httpx.AsyncClient | None = None,
    limiter: RateLimiter | None = None,
) -> list[ProviderModels]:
    """
    List models from all providers concurrently.

    Results follow the order of ``providers``. If any provider fails, the
    whole call fails with the first failing provider's error.
    """
    limiter = limiter or RateLimiter()
    results: list[list[str] | None] = [None] * len(providers)
    errors: list[ProviderError | None] = [None] * len(providers)

    async def _run(index: int, http: httpx.AsyncClient) -> None:
        try:
            results[index] = await fetch_models(http, providers[index], limiter)
        except ProviderError as e:
            errors[index] = e

    async def _gather(http: httpx.AsyncClient) -> None:
        async with anyio.create_task_group() as tg:
            for index in range(len(providers)):
                tg.start_soon(_run, index, http)

    if client is None:
        async with httpx.AsyncClient(timeout=30.0) as owned:
            await _gather(owned)
    else:
        await _gather(client)

    for error in errors:
        if error is not None:
            raise error
    return [
        ProviderModels(provider=provider.name, models=models or [])
        for provider, models in zip(providers, results, strict=True)
    ]


def load_providers() -> list[ProviderConfig]:
    """
    Read provider definitions from the ``providers`` config key.

    Each entry: ``{"name", "kind", "base_url"?, "api_key_env"?}``. API keys
    are read from the environment, never stored in the config file.

    Raises:
        ConfigError: If an entry is malformed.
    """
    raw = get_config_value("providers", [])
    if not isinstance(raw, list):
        raise ConfigError("'providers' must be a list")

    providers = []
    for entry in raw:
        if not isinstance(entry, dict) or entry.get("kind") not in DEFAULT_BASE_URLS:
            raise ConfigError(f"Invalid provider entry: {entry!r}")
        kind = entry["kind"]
        env_var = entry.get("api_key_env") or DEFAULT_API_KEY_ENV.get(kind)
        providers.append(
            ProviderConfig(
                name=str(entry.get("name") or kind),
                kind=kind,
                base_url=entry.get("base_url"),
                api_key=os.getenv(env_var) if env_var else None,
            )
        )
    return providers
