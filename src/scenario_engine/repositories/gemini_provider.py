"""Google Gemini generation provider.

Uses the ``generateContent`` REST endpoint:
https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent

The system instruction is sent in the dedicated ``systemInstruction``
field; sampling parameters go into ``generationConfig``.
"""

from typing import Any

import httpx

from scenario_engine.config import settings
from scenario_engine.entities import GenerationParams, TokenUsage
from scenario_engine.errors import AuthError, ContentFiltered, ProviderError, QuotaExceeded

from .http_provider import HTTPGenerationProvider, ProviderRequest

BLOCKING_FINISH_REASONS = {"SAFETY", "PROHIBITED_CONTENT", "BLOCKLIST", "SPII"}


class GeminiProvider(HTTPGenerationProvider):
    """Gemini implementation of the GenerationProvider protocol.

    Example:
        ```python
        provider = GeminiProvider.create(api_key="...")
        response = await provider.generate(system, user, GenerationParams())
        print(response.content)
        ```
    """

    provider_name = "gemini"

    @classmethod
    def create(
        cls,
        api_key: str | None = None,
        model_name: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> "GeminiProvider":
        """Factory method to create GeminiProvider with defaults from settings."""
        return cls(
            model_name=model_name or settings.gemini_model,
            base_url=base_url or settings.gemini_base_url,
            api_key=api_key or settings.gemini_api_key,
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
            url=f"{self._base_url}/models/{self._model_name}:generateContent",
            payload={
                "systemInstruction": {"parts": [{"text": system_instruction}]},
                "contents": [{"role": "user", "parts": [{"text": user_instruction}]}],
                "generationConfig": {
                    "temperature": params.temperature,
                    "topK": params.top_k,
                    "topP": params.top_p,
                    "maxOutputTokens": max_tokens,
                },
            },
            query={"key": self._api_key or ""},
        )

    def _parse_response(self, data: dict[str, Any]) -> tuple[str | None, TokenUsage | None]:
        block_reason = (data.get("promptFeedback") or {}).get("blockReason")
        if block_reason:
            raise ContentFiltered(self.name, f"prompt blocked: {block_reason}")

        candidates = data.get("candidates") or []
        if not candidates:
            return None, None

        candidate = candidates[0]
        finish_reason = candidate.get("finishReason")
        if finish_reason in BLOCKING_FINISH_REASONS:
            raise ContentFiltered(self.name, f"output blocked: {finish_reason}")

        parts = (candidate.get("content") or {}).get("parts") or []
        text = "".join(part.get("text", "") for part in parts)

        usage = None
        metadata = data.get("usageMetadata")
        if metadata:
            prompt_tokens = int(metadata.get("promptTokenCount", 0))
            completion_tokens = int(metadata.get("candidatesTokenCount", 0))
            usage = TokenUsage(
                prompt=prompt_tokens,
                completion=completion_tokens,
                total=int(metadata.get("totalTokenCount", prompt_tokens + completion_tokens)),
            )
        return text, usage

    def _classify_error(self, status: int, detail: str) -> type[ProviderError]:
        if "API_KEY_INVALID" in detail or "PERMISSION_DENIED" in detail:
            return AuthError
        if "RESOURCE_EXHAUSTED" in detail or "QUOTA_EXCEEDED" in detail:
            return QuotaExceeded
        return super()._classify_error(status, detail)
