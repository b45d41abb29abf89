"""Ordered registry of generation providers.

The registry keeps providers in configured priority order together with
their availability state:

- disabled: credentials were rejected; stays off until ``enable()``
- suspended: quota exhausted; skipped until the cool-down elapses

No other health-based reordering happens; a provider that failed
transiently is simply tried again on the next request.
"""

import asyncio
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from scenario_engine.config import Settings
from scenario_engine.log import get_logger
from scenario_engine.protocols import GenerationProvider
from scenario_engine.repositories import (
    AnthropicProvider,
    GeminiProvider,
    OllamaProvider,
    OpenAIProvider,
)

logger = get_logger(__name__)


def build_provider(name: str, config: Settings) -> GenerationProvider | None:
    """Create the adapter for a provider name from configuration.

    Returns:
        The adapter, or None when its credentials are not configured
    """
    match name:
        case "gemini":
            if not config.gemini_api_key:
                return None
            return GeminiProvider.create(
                api_key=config.gemini_api_key,
                model_name=config.gemini_model,
                base_url=config.gemini_base_url,
                timeout=config.provider_timeout,
            )
        case "openai":
            if not config.openai_api_key:
                return None
            return OpenAIProvider.create(
                api_key=config.openai_api_key,
                model_name=config.openai_model,
                base_url=config.openai_base_url,
                timeout=config.provider_timeout,
            )
        case "anthropic":
            if not config.anthropic_api_key:
                return None
            return AnthropicProvider.create(
                api_key=config.anthropic_api_key,
                model_name=config.anthropic_model,
                base_url=config.anthropic_base_url,
                timeout=config.provider_timeout,
            )
        case "ollama":
            return OllamaProvider.create(
                model_name=config.ollama_model,
                base_url=config.ollama_base_url,
                timeout=config.provider_timeout,
            )
        case _:
            raise ValueError(f"Unsupported AI provider: {name}")


@dataclass
class _ProviderState:
    provider: GenerationProvider
    disabled_reason: str | None = None
    suspended_until: float = 0.0


class ProviderRegistry:
    """Providers in priority order plus their availability state.

    All state changes happen without awaiting, so they are atomic with
    respect to concurrent requests on the same event loop.
    """

    def __init__(
        self,
        providers: Iterable[GenerationProvider] = (),
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._states: dict[str, _ProviderState] = {}
        self._clock = clock
        for provider in providers:
            self.register(provider)

    @classmethod
    def from_settings(cls, config: Settings) -> "ProviderRegistry":
        """Build the registry for ``config.provider_order``.

        Providers without credentials are skipped with a warning.
        """
        registry = cls()
        for name in config.provider_order:
            provider = build_provider(name, config)
            if provider is None:
                logger.warning("Skipping provider %s: no API key configured", name)
                continue
            registry.register(provider)
        logger.info("AI providers in priority order: %s", registry.names or "none")
        return registry

    def register(self, provider: GenerationProvider) -> None:
        if provider.name in self._states:
            raise ValueError(f"provider {provider.name} already registered")
        self._states[provider.name] = _ProviderState(provider=provider)

    @property
    def names(self) -> list[str]:
        return list(self._states)

    def __len__(self) -> int:
        return len(self._states)

    def get(self, name: str) -> GenerationProvider:
        if name not in self._states:
            raise KeyError(f"provider {name} not registered")
        return self._states[name].provider

    def available(self) -> list[GenerationProvider]:
        """Return usable providers in priority order."""
        now = self._clock()
        return [
            state.provider
            for state in self._states.values()
            if state.disabled_reason is None and state.suspended_until <= now
        ]

    def disable(self, name: str, reason: str) -> None:
        """Take a provider out of rotation until it is re-enabled."""
        self._states[name].disabled_reason = reason
        logger.error("Provider %s disabled: %s", name, reason)

    def enable(self, name: str) -> None:
        """Put a provider back into rotation, clearing any suspension."""
        state = self._states[name]
        state.disabled_reason = None
        state.suspended_until = 0.0
        logger.info("Provider %s enabled", name)

    def suspend(self, name: str, seconds: float) -> None:
        """Skip a provider for ``seconds``."""
        self._states[name].suspended_until = self._clock() + seconds
        logger.warning("Provider %s suspended for %ss", name, seconds)

    def info(self) -> list[dict[str, Any]]:
        """Describe each provider and its availability."""
        now = self._clock()
        return [
            {
                "provider": name,
                "model": state.provider.model_name,
                "priority": priority,
                "enabled": state.disabled_reason is None,
                "disabled_reason": state.disabled_reason,
                "suspended_for_seconds": max(0.0, round(state.suspended_until - now, 1)),
            }
            for priority, (name, state) in enumerate(self._states.items(), start=1)
        ]

    async def health_check(self) -> list[dict[str, Any]]:
        """Probe every registered provider concurrently (informational only)."""
        return list(
            await asyncio.gather(
                *(state.provider.health_check() for state in self._states.values())
            )
        )

    async def close(self) -> None:
        """Release every provider's HTTP client."""
        for state in self._states.values():
            await state.provider.close()
