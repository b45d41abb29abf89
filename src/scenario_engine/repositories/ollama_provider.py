"""Ollama-based generation provider.

Uses Ollama's local chat API to generate scenarios. Ollama serves models
locally without API keys, which makes it a convenient last-resort provider
before the static fallback.

Requirements:
    - Ollama installed: https://ollama.com
    - Model pulled: `ollama pull llama3`
    - Ollama running: `ollama serve` (usually runs automatically)
"""

from typing import Any

import httpx

from scenario_engine.config import settings
from scenario_engine.entities import GenerationParams, TokenUsage

from .http_provider import HTTPGenerationProvider, ProviderRequest


class OllamaProvider(HTTPGenerationProvider):
    """Ollama implementation of the GenerationProvider protocol.

    The API endpoint is http://localhost:11434/api/chat by default.
    Streaming is disabled so the whole answer arrives in one JSON body.

    Example:
        ```python
        provider = OllamaProvider.create(
            model_name="llama3",
            base_url="http://localhost:11434"
        )
        response = await provider.generate(system, user, GenerationParams())
        ```
    """

    provider_name = "ollama"

    @classmethod
    def create(
        cls,
        model_name: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> "OllamaProvider":
        """Factory method to create OllamaProvider with defaults.

        Args:
            model_name: Model name. If None, uses settings.
            base_url: Ollama API URL. If None, uses settings.
            timeout: Request timeout in seconds. If None, uses settings.
            client: Pre-built HTTP client.

        Returns:
            Configured OllamaProvider
        """
        return cls(
            model_name=model_name or settings.ollama_model,
            base_url=base_url or settings.ollama_base_url,
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
            url=f"{self._base_url}/api/chat",
            payload={
                "model": self._model_name,
                "messages": [
                    {"role": "system", "content": system_instruction},
                    {"role": "user", "content": user_instruction},
                ],
                "stream": False,
                "options": {
                    "temperature": params.temperature,
                    "top_p": params.top_p,
                    "top_k": params.top_k,
                    "num_predict": max_tokens,
                },
            },
        )

    def _parse_response(self, data: dict[str, Any]) -> tuple[str | None, TokenUsage | None]:
        text = (data.get("message") or {}).get("content")

        usage = None
        if "prompt_eval_count" in data or "eval_count" in data:
            usage = TokenUsage.of(
                int(data.get("prompt_eval_count", 0)),
                int(data.get("eval_count", 0)),
            )
        return text, usage
