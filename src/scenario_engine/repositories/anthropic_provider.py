"""Anthropic messages API generation provider."""

from typing import Any

import httpx

from scenario_engine.config import settings
from scenario_engine.entities import GenerationParams, TokenUsage
from scenario_engine.errors import (
    AuthError,
    ContentFiltered,
    ProviderError,
    QuotaExceeded,
    TransientError,
)

from .http_provider import HTTPGenerationProvider, ProviderRequest

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicProvider(HTTPGenerationProvider):
    """Anthropic implementation of the GenerationProvider protocol.

    The system instruction goes into the top-level ``system`` field and the
    user instruction is the single user message.
    """

    provider_name = "anthropic"

    @classmethod
    def create(
        cls,
        api_key: str | None = None,
        model_name: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> "AnthropicProvider":
        """Factory method to create AnthropicProvider with defaults from settings."""
        return cls(
            model_name=model_name or settings.anthropic_model,
            base_url=base_url or settings.anthropic_base_url,
            api_key=api_key or settings.anthropic_api_key,
            timeout=timeout or settings.provider_timeout,
            client=client,
        )

    def _build_request(
        self,
        system_instruction: str,
        user_instruction: str,
        params: GenerationParams,
        max_tokens: int,
    ) -> ProviderRequest:
        return ProviderRequest(
            url=f"{self._base_url}/messages",
            payload={
                "model": self._model_name,
                "max_tokens": max_tokens,
                "temperature": min(params.temperature, 1.0),
                "top_p": params.top_p,
                "top_k": params.top_k,
                "system": system_instruction,
                "messages": [{"role": "user", "content": user_instruction}],
            },
            headers={
                "x-api-key": self._api_key or "",
                "anthropic-version": ANTHROPIC_VERSION,
            },
        )

    def _parse_response(self, data: dict[str, Any]) -> tuple[str | None, TokenUsage | None]:
        if data.get("stop_reason") == "refusal":
            raise ContentFiltered(self.name, "model refused the request")

        blocks = data.get("content") or []
        text = "".join(block.get("text", "") for block in blocks if block.get("type") == "text")

        usage = None
        raw_usage = data.get("usage")
        if raw_usage:
            usage = TokenUsage.of(
                int(raw_usage.get("input_tokens", 0)),
                int(raw_usage.get("output_tokens", 0)),
            )
        return text, usage

    def _classify_error(self, status: int, detail: str) -> type[ProviderError]:
        if "authentication_error" in detail or "permission_error" in detail:
            return AuthError
        if "rate_limit_error" in detail:
            return QuotaExceeded
        if "overloaded_error" in detail:
            return TransientError
        if "invalid_request_error" in detail and "content_filter" in detail:
            return ContentFiltered
        return super()._classify_error(status, detail)
