"""Error taxonomy for scenario generation.

Two hierarchies live here:

- ``ScenarioError`` and its subclasses are the only errors a caller of the
  orchestrator ever sees.
- ``ProviderError`` and its subclasses are raised by provider adapters and
  are always recovered inside the orchestrator by moving on to the next
  provider.

``CacheStoreError`` is raised by cache stores and recovered by the cache
service (treated as a miss on reads and a no-op on writes).
"""

from scenario_engine.entities import GenerationStage


class ScenarioError(Exception):
    """Base class for caller-visible generation errors."""

    code = "GENERATION_ERROR"

    def __init__(self, message: str, stage: GenerationStage = GenerationStage.ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.stage = stage


class ScenarioValidationError(ScenarioError):
    """Input has the wrong shape or length."""

    code = "VALIDATION_ERROR"


class PolicyViolation(ScenarioError):
    """Topic contains a denylisted term."""

    code = "POLICY_VIOLATION"

    def __init__(
        self,
        message: str,
        keyword: str,
        stage: GenerationStage = GenerationStage.ERROR,
    ) -> None:
        super().__init__(message, stage)
        self.keyword = keyword


class GenerationTimeout(ScenarioError):
    """The end-to-end generation deadline elapsed."""

    code = "GENERATION_TIMEOUT"


class ProviderExhausted(ScenarioError):
    """Every provider failed and no static fallback is configured."""

    code = "PROVIDER_EXHAUSTED"


class ProviderError(Exception):
    """Base class for failures reported by a provider adapter."""

    retryable = False

    def __init__(self, provider_name: str, message: str, status_code: int | None = None) -> None:
        super().__init__(f"{provider_name}: {message}")
        self.provider_name = provider_name
        self.message = message
        self.status_code = status_code


class AuthError(ProviderError):
    """Credentials were rejected by the backend."""


class QuotaExceeded(ProviderError):
    """Backend quota or rate limit is exhausted for the current window."""


class ContentFiltered(ProviderError):
    """Backend refused the prompt or withheld the output on safety grounds."""


class TransientError(ProviderError):
    """Network failure, timeout or server-side error."""

    retryable = True


class EmptyResponse(TransientError):
    """Backend answered without usable text."""


class CacheStoreError(Exception):
    """The backing key-value store could not complete an operation."""
