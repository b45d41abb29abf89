"""OpenAI chat completions generation provider."""

from typing import Any

import httpx

from scenario_engine.config import settings
from scenario_engine.entities import GenerationParams, TokenUsage
from scenario_engine.errors import AuthError, ContentFiltered, ProviderError, QuotaExceeded

from .http_provider import HTTPGenerationProvider, ProviderRequest


class OpenAIProvider(HTTPGenerationProvider):
    """OpenAI implementation of the GenerationProvider protocol.

    Sends a system + user message pair to ``/chat/completions``. OpenAI
    has no top-k parameter, so ``params.top_k`` is not forwarded.
    """

    provider_name = "openai"

    @classmethod
    def create(
        cls,
        api_key: str | None = None,
        model_name: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> "OpenAIProvider":
        """Factory method to create OpenAIProvider with defaults from settings."""
        return cls(
            model_name=model_name or settings.openai_model,
            base_url=base_url or settings.openai_base_url,
            api_key=api_key or settings.openai_api_key,
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
            url=f"{self._base_url}/chat/completions",
            payload={
                "model": self._model_name,
                "messages": [
                    {"role": "system", "content": system_instruction},
                    {"role": "user", "content": user_instruction},
                ],
                "max_tokens": max_tokens,
                "temperature": params.temperature,
                "top_p": params.top_p,
                "frequency_penalty": 0.1,
                "presence_penalty": 0.1,
            },
            headers={"Authorization": f"Bearer {self._api_key}"},
        )

    def _parse_response(self, data: dict[str, Any]) -> tuple[str | None, TokenUsage | None]:
        choices = data.get("choices") or []
        if not choices:
            return None, None

        choice = choices[0]
        if choice.get("finish_reason") == "content_filter":
            raise ContentFiltered(self.name, "output withheld by content filter")

        text = (choice.get("message") or {}).get("content")

        usage = None
        raw_usage = data.get("usage")
        if raw_usage:
            usage = TokenUsage(
                prompt=int(raw_usage.get("prompt_tokens", 0)),
                completion=int(raw_usage.get("completion_tokens", 0)),
                total=int(raw_usage.get("total_tokens", 0)),
            )
        return text, usage

    def _classify_error(self, status: int, detail: str) -> type[ProviderError]:
        if "invalid_api_key" in detail:
            return AuthError
        if "insufficient_quota" in detail or "rate_limit_exceeded" in detail:
            return QuotaExceeded
        return super()._classify_error(status, detail)
