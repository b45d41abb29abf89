"""Generation provider protocol.

Defines the interface for any language-model backend that can turn a
system/user instruction pair into narrative text.

Implementations can include:
- Google Gemini
- OpenAI chat completions
- Anthropic messages
- Ollama (local)
"""

from typing import Any, Protocol, runtime_checkable

from scenario_engine.entities import GenerationParams, ProviderResponse


@runtime_checkable
class GenerationProvider(Protocol):
    """Protocol for text generation backends.

    Example:
        ```python
        provider: GenerationProvider = GeminiProvider.create(api_key="...")
        response = await provider.generate(system, user, GenerationParams())
        ```
    """

    @property
    def name(self) -> str:
        """Return the registered provider name (e.g. "gemini")."""
        ...

    @property
    def model_name(self) -> str:
        """Return the model identifier used for generation."""
        ...

    async def generate(
        self,
        system_instruction: str,
        user_instruction: str,
        params: GenerationParams,
    ) -> ProviderResponse:
        """Generate text for the given instructions.

        Args:
            system_instruction: Role, tone and safety directive
            user_instruction: The topic-specific request
            params: Sampling parameters

        Returns:
            The generated text with usage metadata

        Raises:
            AuthError, QuotaExceeded, ContentFiltered, TransientError,
            EmptyResponse or ProviderError on failure
        """
        ...

    async def health_check(self) -> dict[str, Any]:
        """Verify reachability with a minimal request.

        Informational only, never raises.

        Returns:
            Dict with ``status``, ``provider``, ``model`` and either
            ``response`` or ``error``
        """
        ...

    async def close(self) -> None:
        """Release the HTTP client."""
        ...
