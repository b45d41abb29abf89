"""Shared plumbing for HTTP/JSON generation providers.

Concrete adapters only describe their vendor's wire format: how to build
the request, how to read the response, and which error bodies mean what.
This base class owns the HTTP client and the translation of transport and
status failures into the provider error taxonomy:

- 401 / 403              -> AuthError
- 429                    -> QuotaExceeded
- vendor filter signals  -> ContentFiltered
- 5xx, timeouts, network -> TransientError
- malformed 200 body     -> TransientError
- blank text             -> EmptyResponse
- anything else          -> ProviderError
"""

import math
from dataclasses import dataclass, field
from typing import Any

import httpx

from scenario_engine.entities import GenerationParams, ProviderResponse, TokenUsage
from scenario_engine.errors import (
    AuthError,
    ContentFiltered,
    EmptyResponse,
    ProviderError,
    QuotaExceeded,
    TransientError,
)
from scenario_engine.log import get_logger

logger = get_logger(__name__)

HEALTH_CHECK_MAX_TOKENS = 10


@dataclass
class ProviderRequest:
    """A vendor-specific HTTP request."""

    url: str
    payload: dict[str, Any]
    headers: dict[str, str] = field(default_factory=dict)
    query: dict[str, str] = field(default_factory=dict)


def estimate_tokens(text: str) -> int:
    """Rough token estimate (about four characters per token)."""
    return math.ceil(len(text) / 4)


class HTTPGenerationProvider:
    """Base class for providers reached over an HTTP JSON API.

    Subclasses set ``provider_name`` and implement ``_build_request`` and
    ``_parse_response``; they may extend ``_classify_error`` for vendor
    specific error bodies.
    """

    provider_name = "http"

    def __init__(
        self,
        model_name: str,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            model_name: Model identifier sent to the backend.
            base_url: API base URL, without trailing slash.
            api_key: Credential for the backend, if it needs one.
            timeout: Per-request timeout in seconds.
            client: Pre-built HTTP client (mainly for tests). If None, one is
                    created lazily.
        """
        self._model_name = model_name
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client.

        Returns:
            The httpx.AsyncClient instance
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    @property
    def name(self) -> str:
        return self.provider_name

    @property
    def model_name(self) -> str:
        return self._model_name

    async def generate(
        self,
        system_instruction: str,
        user_instruction: str,
        params: GenerationParams,
    ) -> ProviderResponse:
        """Generate text for the given instructions.

        Raises:
            ProviderError: One of its subclasses, depending on the failure
        """
        logger.info(
            "Generating scenario with %s (model=%s, temperature=%s, max_tokens=%s)",
            self.name,
            self._model_name,
            params.temperature,
            params.max_tokens,
        )
        response = await self._complete(
            system_instruction, user_instruction, params, params.max_tokens
        )
        logger.info(
            "Scenario generated with %s (%d chars, %d tokens)",
            self.name,
            len(response.content),
            response.token_usage.total,
        )
        return response

    async def health_check(self) -> dict[str, Any]:
        """Verify reachability with a minimal request.

        Returns:
            Dict with status, provider, model and response or error
        """
        try:
            response = await self._complete(
                "Reply briefly.", "Hello", GenerationParams(), HEALTH_CHECK_MAX_TOKENS
            )
        except ProviderError as e:
            return {
                "status": "unhealthy",
                "provider": self.name,
                "model": self._model_name,
                "error": e.message,
            }
        return {
            "status": "healthy",
            "provider": self.name,
            "model": self._model_name,
            "response": response.content[:50],
        }

    async def close(self) -> None:
        """Close the async HTTP client.

        Should be called when shutting down the application.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _complete(
        self,
        system_instruction: str,
        user_instruction: str,
        params: GenerationParams,
        max_tokens: int,
    ) -> ProviderResponse:
        request = self._build_request(system_instruction, user_instruction, params, max_tokens)
        data = await self._send(request)
        try:
            text, usage = self._parse_response(data)
            text = (text or "").strip()
        except (TypeError, AttributeError, KeyError, ValueError) as e:
            raise TransientError(self.name, f"unexpected response body: {e}") from e

        if not text:
            raise EmptyResponse(self.name, "backend returned no text")

        if usage is None:
            usage = TokenUsage.of(
                estimate_tokens(system_instruction + user_instruction), estimate_tokens(text)
            )

        return ProviderResponse(
            content=text,
            provider_name=self.name,
            model_name=self._model_name,
            token_usage=usage,
        )

    async def _send(self, request: ProviderRequest) -> dict[str, Any]:
        try:
            response = await self.client.post(
                request.url,
                json=request.payload,
                headers=request.headers,
                params=request.query,
            )
        except httpx.TimeoutException as e:
            raise TransientError(self.name, f"request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise TransientError(self.name, f"request failed: {e}") from e

        if response.is_error:
            raise self._error_for_response(response)

        try:
            data = response.json()
        except ValueError as e:
            raise TransientError(self.name, "response is not valid JSON") from e

        if not isinstance(data, dict):
            raise TransientError(self.name, "unexpected response format")
        return data

    def _error_for_response(self, response: httpx.Response) -> ProviderError:
        status = response.status_code
        detail = response.text[:500]
        error_type = self._classify_error(status, detail)
        return error_type(self.name, f"HTTP {status}: {detail}", status_code=status)

    def _classify_error(self, status: int, detail: str) -> type[ProviderError]:
        """Map an HTTP error response to a provider error class."""
        if "content_filter" in detail.lower():
            return ContentFiltered
        if status in (401, 403):
            return AuthError
        if status == 429:
            return QuotaExceeded
        if status >= 500:
            return TransientError
        return ProviderError

    def _build_request(
        self,
        system_instruction: str,
        user_instruction: str,
        params: GenerationParams,
        max_tokens: int,
    ) -> ProviderRequest:
        raise NotImplementedError

    def _parse_response(self, data: dict[str, Any]) -> tuple[str | None, TokenUsage | None]:
        """Extract the generated text and token usage from a response body.

        Returns ``None`` usage when the backend does not report it; the
        caller then estimates it.

        Raises:
            ContentFiltered: If the backend withheld the output
        """
        raise NotImplementedError
