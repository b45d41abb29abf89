"""HTTP handlers for scenario operations.

Handlers convert between DTOs (API contracts) and orchestrator calls.
They handle HTTP concerns like status codes, validation, and error handling.
"""

from collections.abc import Awaitable
from typing import TypeVar

from fastapi import HTTPException, status

from scenario_engine.dto import (
    BatchGenerateRequest,
    BatchGenerateResponse,
    BatchItemResponse,
    ClearCacheResponse,
    GenerateScenarioRequest,
    GenerationOptions,
    HealthCheckResponse,
    ProviderInfoItem,
    ProvidersResponse,
    RandomScenarioRequest,
    RegenerateScenarioRequest,
    ScenarioResponse,
    StatsResponse,
    TokenUsageItem,
)
from scenario_engine.entities import GenerationParams, GenerationResult
from scenario_engine.errors import (
    GenerationTimeout,
    PolicyViolation,
    ProviderExhausted,
    ScenarioError,
    ScenarioValidationError,
)
from scenario_engine.log import get_logger
from scenario_engine.services import ScenarioOrchestrator

logger = get_logger(__name__)

T = TypeVar("T")

ERROR_STATUS: dict[type[ScenarioError], int] = {
    ScenarioValidationError: status.HTTP_400_BAD_REQUEST,
    PolicyViolation: status.HTTP_400_BAD_REQUEST,
    GenerationTimeout: status.HTTP_408_REQUEST_TIMEOUT,
    ProviderExhausted: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def to_http_exception(error: ScenarioError) -> HTTPException:
    """Map a caller-visible generation error to an HTTP error."""
    status_code = next(
        (code for kind, code in ERROR_STATUS.items() if isinstance(error, kind)),
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
    return HTTPException(
        status_code=status_code,
        detail={"code": error.code, "message": error.message},
    )


def to_scenario_response(result: GenerationResult) -> ScenarioResponse:
    """Convert a result entity to its DTO."""
    return ScenarioResponse(
        id=result.id,
        topic=result.topic,
        content=result.content,
        strategy=result.strategy.value,
        provider=result.provider_name,
        model=result.model_name,
        token_usage=TokenUsageItem(
            prompt=result.token_usage.prompt,
            completion=result.token_usage.completion,
            total=result.token_usage.total,
        ),
        generated_at=result.generated_at,
        served_from_cache=result.served_from_cache,
    )


class ScenarioHandler:
    """HTTP handlers for scenario operations.

    This handler delegates business logic to ScenarioOrchestrator
    and handles HTTP-specific concerns like:
    - Converting entities to DTOs
    - Setting appropriate status codes
    - Error handling and responses

    Example:
        ```python
        handler = ScenarioHandler(orchestrator=orchestrator)

        @app.post("/scenarios", response_model=ScenarioResponse)
        async def generate(request: GenerateScenarioRequest):
            return await handler.generate(request)
        ```
    """

    def __init__(self, orchestrator: ScenarioOrchestrator) -> None:
        """Initialize the scenario handler.

        Args:
            orchestrator: The orchestrator for business logic (required).
        """
        self._orchestrator = orchestrator

    async def generate(self, request: GenerateScenarioRequest) -> ScenarioResponse:
        """Handle POST /scenarios requests.

        Raises:
            HTTPException: 400 on bad input or a blocked topic, 408 on
                timeout, 503 when no provider or fallback could answer
        """
        params = self._params(request, force_fresh=request.force_fresh)
        result = await self._call(self._orchestrator.generate(request.topic, params))
        return to_scenario_response(result)

    async def regenerate(self, request: RegenerateScenarioRequest) -> ScenarioResponse:
        """Handle POST /scenarios/regenerate requests."""
        params = self._params(request)
        result = await self._call(self._orchestrator.regenerate(request.topic, params))
        return to_scenario_response(result)

    async def generate_random(self, request: RandomScenarioRequest) -> ScenarioResponse:
        """Handle POST /scenarios/random requests."""
        params = self._params(request)
        result = await self._call(self._orchestrator.generate_random(params))
        return to_scenario_response(result)

    async def generate_batch(self, request: BatchGenerateRequest) -> BatchGenerateResponse:
        """Handle POST /scenarios/batch requests.

        Per-topic failures are reported inside the response, not as an
        HTTP error.
        """
        params = self._params(request, force_fresh=request.force_fresh)
        items = await self._call(self._orchestrator.generate_batch(request.topics, params))

        responses = [
            BatchItemResponse(
                index=item.index,
                topic=item.topic,
                success=item.ok,
                scenario=to_scenario_response(item.result) if item.result else None,
                error=item.error,
                error_code=item.error_code,
            )
            for item in items
        ]
        succeeded = sum(1 for item in responses if item.success)
        return BatchGenerateResponse(
            items=responses,
            succeeded=succeeded,
            failed=len(responses) - succeeded,
        )

    async def clear_cache(self, topic: str) -> ClearCacheResponse:
        """Handle DELETE /cache requests."""
        removed = await self._call(self._orchestrator.clear_cache(topic))
        return ClearCacheResponse(
            success=removed,
            topic=topic.strip(),
            message="Cache cleared successfully" if removed else "No cached scenario for topic",
        )

    async def health(self) -> HealthCheckResponse:
        """Handle GET /health requests."""
        report = await self._orchestrator.health_check()
        return HealthCheckResponse(**report)

    async def providers(self) -> ProvidersResponse:
        """Handle GET /providers requests."""
        return ProvidersResponse(
            providers=[ProviderInfoItem(**info) for info in self._orchestrator.provider_info()],
            fallback_enabled=self._orchestrator.fallback_enabled,
        )

    async def stats(self) -> StatsResponse:
        """Handle GET /stats requests."""
        return StatsResponse(
            metrics=self._orchestrator.metrics.to_dict(),
            cache_ttl_seconds=self._orchestrator.cache.ttl,
            providers=self._orchestrator.registry.names,
        )

    def _params(self, options: GenerationOptions, force_fresh: bool | None = None) -> GenerationParams:
        try:
            return self._orchestrator.params_from_options(
                temperature=options.temperature,
                max_tokens=options.max_tokens,
                top_p=options.top_p,
                top_k=options.top_k,
                strategy=options.strategy,
                force_fresh=force_fresh,
            )
        except ScenarioError as e:
            raise to_http_exception(e) from e

    async def _call(self, operation: Awaitable[T]) -> T:
        try:
            return await operation
        except ScenarioError as e:
            raise to_http_exception(e) from e
        except Exception as e:
            logger.exception("Unexpected error while handling request")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail={"code": "INTERNAL_ERROR", "message": f"Failed to generate scenario: {e}"},
            ) from e
