"""Scenario generation orchestrator.

Coordinates the full request flow:

    CacheCheck -> Classifying -> Generating(attempt=i) -> PostProcessing -> Caching -> Done

with ``Error`` reachable from any stage. Provider failures and cache
faults are recovered here; callers only ever see a ``GenerationResult`` or
one of ``ScenarioValidationError``, ``PolicyViolation``,
``GenerationTimeout`` and ``ProviderExhausted``.
"""

import asyncio
import random
import time
from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from scenario_engine.config import Settings, settings
from scenario_engine.entities import (
    BatchItem,
    GenerationParams,
    GenerationResult,
    GenerationStage,
    PromptSpec,
    ProviderResponse,
    new_scenario_id,
)
from scenario_engine.errors import (
    AuthError,
    ContentFiltered,
    GenerationTimeout,
    ProviderError,
    ProviderExhausted,
    QuotaExceeded,
    ScenarioError,
    ScenarioValidationError,
)
from scenario_engine.log import get_logger
from scenario_engine.models import AttemptRecord, GenerationMetrics
from scenario_engine.protocols import GenerationProvider

from . import classifier, prompt_builder
from .fallback import StaticFallback
from .provider_registry import ProviderRegistry
from .safety import SafetyFilter
from .scenario_cache import ScenarioCache

logger = get_logger(__name__)

MIN_TOPIC_LENGTH = 3
MAX_TOPIC_LENGTH = 200
MAX_BATCH_SIZE = 10

RANDOM_TOPICS: tuple[str, ...] = (
    "Nếu như con người có thể bay",
    "Nếu như động vật có thể nói chuyện",
    "Nếu như thời gian có thể dừng lại",
    "Nếu như mọi người đều có siêu năng lực",
    "Nếu như Internet không tồn tại",
    "Nếu như con người sống được 1000 năm",
    "Nếu như trọng lực Trái Đất yếu hơn",
    "Nếu như mọi người đều có thể đọc được suy nghĩ",
    "Nếu như robot thông minh hơn con người",
    "Nếu như có thể du hành thời gian",
)


def validate_topic(topic: Any) -> str:
    """Return the trimmed topic or raise if it has the wrong shape.

    Raises:
        ScenarioValidationError: If the topic is not a string of 3 to 200
            characters after trimming
    """
    if not isinstance(topic, str):
        raise ScenarioValidationError("Topic must be a string")
    trimmed = topic.strip()
    if not MIN_TOPIC_LENGTH <= len(trimmed) <= MAX_TOPIC_LENGTH:
        raise ScenarioValidationError(
            f"Topic must be between {MIN_TOPIC_LENGTH} and {MAX_TOPIC_LENGTH} characters"
        )
    return trimmed


class ScenarioOrchestrator:
    """Turns a topic into a scenario with cache, fallback and deadline handling.

    The orchestrator never owns connections: the registry's HTTP clients
    and the cache store are created and closed by whoever builds it.

    Example:
        ```python
        orchestrator = ScenarioOrchestrator.create(
            registry=ProviderRegistry.from_settings(settings),
            cache=ScenarioCache.create(store=create_cache_store(settings)),
        )
        result = await orchestrator.generate("Nếu như con người có thể bay")
        ```
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        cache: ScenarioCache,
        safety: SafetyFilter,
        fallback: StaticFallback | None,
        default_params: GenerationParams | None = None,
        deadline_seconds: float = 30.0,
        batch_concurrency: int = 3,
        quota_cooldown_seconds: float = 60.0,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            registry: Providers in priority order.
            cache: Result cache.
            safety: Topic denylist and output post-processing.
            fallback: Static content used when every provider fails, or None.
            default_params: Parameters used when a request supplies none.
            deadline_seconds: Budget shared by the whole provider pass.
            batch_concurrency: Maximum concurrent generations in a batch.
            quota_cooldown_seconds: How long a provider is skipped after a quota error.
        """
        self._registry = registry
        self._cache = cache
        self._safety = safety
        self._fallback = fallback
        self._default_params = default_params or GenerationParams()
        self._deadline = deadline_seconds
        self._batch_concurrency = batch_concurrency
        self._quota_cooldown = quota_cooldown_seconds
        self._metrics = GenerationMetrics()

    @classmethod
    def create(
        cls,
        registry: ProviderRegistry,
        cache: ScenarioCache,
        config: Settings | None = None,
    ) -> "ScenarioOrchestrator":
        """Factory method filling policy knobs from settings.

        Args:
            registry: Providers in priority order (required).
            cache: Result cache (required).
            config: Settings to read from. Defaults to the global settings.

        Returns:
            Configured ScenarioOrchestrator instance
        """
        config = config or settings
        return cls(
            registry=registry,
            cache=cache,
            safety=SafetyFilter(
                config.blocked_keywords,
                scan_output=config.scan_generated_content,
            ),
            fallback=StaticFallback() if config.fallback_enabled else None,
            default_params=GenerationParams(
                temperature=config.default_temperature,
                max_tokens=config.default_max_tokens,
                top_p=config.default_top_p,
                top_k=config.default_top_k,
            ),
            deadline_seconds=config.generation_deadline_seconds,
            batch_concurrency=config.batch_concurrency,
            quota_cooldown_seconds=config.quota_cooldown_seconds,
        )

    @property
    def registry(self) -> ProviderRegistry:
        return self._registry

    @property
    def cache(self) -> ScenarioCache:
        return self._cache

    @property
    def default_params(self) -> GenerationParams:
        return self._default_params

    @property
    def fallback_enabled(self) -> bool:
        return self._fallback is not None

    @property
    def metrics(self) -> GenerationMetrics:
        """Get the running counters."""
        return self._metrics

    def params_from_options(self, **options: Any) -> GenerationParams:
        """Overlay caller options on the default parameters.

        None values are ignored.

        Raises:
            ScenarioValidationError: If an option is unknown or out of bounds
        """
        try:
            return self._default_params.with_overrides(**options)
        except (TypeError, ValueError) as e:
            raise ScenarioValidationError(str(e)) from e

    async def generate(
        self,
        topic: str,
        params: GenerationParams | None = None,
    ) -> GenerationResult:
        """Generate (or fetch from cache) a scenario for a topic.

        Args:
            topic: Free-text premise, 3 to 200 characters after trimming
            params: Sampling and caching options. Defaults to the configured ones.

        Returns:
            The generated, fallback or cached result

        Raises:
            ScenarioValidationError: Bad input
            PolicyViolation: Topic contains a denylisted term
            GenerationTimeout: Providers did not answer within the deadline
            ProviderExhausted: Every provider failed and there is no fallback
        """
        params = params or self._default_params
        self._metrics.record_request()

        try:
            trimmed = validate_topic(topic)
            self._safety.check_topic(trimmed)
        except ScenarioError:
            self._metrics.record_rejection()
            raise

        logger.debug("Stage %s: %r", GenerationStage.CACHE_CHECK.value, trimmed)
        if not params.force_fresh:
            cached = await self._cache.get(trimmed)
            if cached is not None:
                self._metrics.record_hit()
                logger.info("Cache hit for %r (%s)", trimmed, cached.id)
                return replace(cached, served_from_cache=True)
        self._metrics.record_miss()

        logger.debug("Stage %s: %r", GenerationStage.CLASSIFYING.value, trimmed)
        strategy = params.strategy or classifier.classify(trimmed)
        prompt = prompt_builder.build(strategy, trimmed)

        response = await self._generate_with_deadline(trimmed, prompt, params)

        logger.debug("Stage %s", GenerationStage.POST_PROCESSING.value)
        result = GenerationResult(
            id=new_scenario_id(),
            topic=trimmed,
            content=self._safety.post_process(response.content),
            strategy=strategy,
            provider_name=response.provider_name,
            model_name=response.model_name,
            token_usage=response.token_usage,
            generated_at=datetime.now(timezone.utc),
        )

        logger.debug("Stage %s: %s", GenerationStage.CACHING.value, result.id)
        await self._cache.set(trimmed, result)

        logger.info(
            "Generated %s for %r with %s/%s (%s, %d tokens)",
            result.id,
            trimmed,
            result.provider_name,
            result.model_name,
            strategy.value,
            result.token_usage.total,
        )
        return result

    async def regenerate(
        self,
        topic: str,
        params: GenerationParams | None = None,
    ) -> GenerationResult:
        """Generate a new scenario, ignoring any cached one."""
        params = replace(params or self._default_params, force_fresh=True)
        return await self.generate(topic, params)

    async def generate_random(self, params: GenerationParams | None = None) -> GenerationResult:
        """Generate a fresh scenario for a topic picked from the sample list."""
        topic = random.choice(RANDOM_TOPICS)
        logger.info("Generating random scenario for %r", topic)
        return await self.regenerate(topic, params)

    async def generate_batch(
        self,
        topics: Sequence[str],
        params: GenerationParams | None = None,
    ) -> list[BatchItem]:
        """Generate scenarios for several topics with bounded concurrency.

        A failing topic is reported in its own item and never fails the batch.

        Raises:
            ScenarioValidationError: If the batch is empty or larger than 10 topics
        """
        if not 1 <= len(topics) <= MAX_BATCH_SIZE:
            raise ScenarioValidationError(f"Batch must contain 1 to {MAX_BATCH_SIZE} topics")

        semaphore = asyncio.Semaphore(self._batch_concurrency)

        async def run(index: int, topic: str) -> BatchItem:
            async with semaphore:
                try:
                    result = await self.generate(topic, params)
                except ScenarioError as e:
                    logger.warning("Batch item %d (%r) failed: %s", index, topic, e.message)
                    return BatchItem(index=index, topic=topic, error=e.message, error_code=e.code)
                return BatchItem(index=index, topic=topic, result=result)

        items = await asyncio.gather(*(run(i, topic) for i, topic in enumerate(topics)))
        succeeded = sum(1 for item in items if item.ok)
        logger.info("Batch finished: %d/%d succeeded", succeeded, len(items))
        return list(items)

    async def clear_cache(self, topic: str) -> bool:
        """Drop the cached scenario for a topic.

        Returns:
            True if an entry was removed
        """
        trimmed = validate_topic(topic)
        removed = await self._cache.delete(trimmed)
        logger.info("Cache cleared for %r: %s", trimmed, removed)
        return removed

    async def health_check(self) -> dict[str, Any]:
        """Report cache and provider reachability (informational only)."""
        cache_ok = await self._cache.is_healthy()
        providers = await self._registry.health_check()
        any_provider = any(p.get("status") == "healthy" for p in providers)
        return {
            "status": "healthy" if cache_ok and any_provider else "degraded",
            "cache": "healthy" if cache_ok else "unhealthy",
            "providers": providers,
            "fallback_enabled": self.fallback_enabled,
        }

    def provider_info(self) -> list[dict[str, Any]]:
        return self._registry.info()

    async def _generate_with_deadline(
        self,
        topic: str,
        prompt: PromptSpec,
        params: GenerationParams,
    ) -> ProviderResponse:
        """Run the provider pass under the shared deadline, then fall back."""
        attempts: list[AttemptRecord] = []
        providers = self._registry.available()

        try:
            response = await asyncio.wait_for(
                self._try_providers(providers, prompt, params, attempts),
                timeout=self._deadline,
            )
        except asyncio.TimeoutError:
            self._metrics.record_timeout()
            logger.error(
                "Generation for %r exceeded %.1fs deadline; attempts: %s",
                topic,
                self._deadline,
                self._describe(attempts) or "none finished",
            )
            raise GenerationTimeout(
                f"Scenario generation timed out after {self._deadline:g}s",
                stage=GenerationStage.GENERATING,
            ) from None

        if attempts:
            logger.info("Provider attempts for %r: %s", topic, self._describe(attempts))

        if response is not None:
            return response

        if self._fallback is None:
            raise ProviderExhausted(
                "No AI provider could generate the scenario",
                stage=GenerationStage.GENERATING,
            )

        self._metrics.record_fallback()
        logger.warning(
            "All %d provider(s) failed for %r, using static fallback",
            len(providers),
            topic,
        )
        return self._fallback.respond(topic)

    async def _try_providers(
        self,
        providers: Iterable[GenerationProvider],
        prompt: PromptSpec,
        params: GenerationParams,
        attempts: list[AttemptRecord],
    ) -> ProviderResponse | None:
        """Single pass over the providers; None if all of them failed."""
        for attempt_number, provider in enumerate(providers, start=1):
            logger.debug(
                "Stage %s (attempt=%d): %s",
                GenerationStage.GENERATING.value,
                attempt_number,
                provider.name,
            )
            started = time.perf_counter()
            try:
                response = await provider.generate(
                    prompt.system_instruction,
                    prompt.user_instruction,
                    params,
                )
                keyword = self._safety.output_violation(response.content)
                if keyword is not None:
                    raise ContentFiltered(
                        provider.name, f"generated content contains blocked keyword {keyword!r}"
                    )
            except ProviderError as e:
                self._handle_failure(provider, e)
                self._record(attempts, provider, type(e).__name__, started, e.message)
                continue

            self._record(attempts, provider, "success", started)
            return response

        return None

    def _handle_failure(self, provider: GenerationProvider, error: ProviderError) -> None:
        logger.warning("Provider %s failed: %s", provider.name, error)
        if isinstance(error, AuthError):
            self._registry.disable(provider.name, error.message)
        elif isinstance(error, QuotaExceeded):
            self._registry.suspend(provider.name, self._quota_cooldown)

    def _record(
        self,
        attempts: list[AttemptRecord],
        provider: GenerationProvider,
        outcome: str,
        started: float,
        detail: str | None = None,
    ) -> None:
        attempt = AttemptRecord(
            provider=provider.name,
            outcome=outcome,
            duration_ms=(time.perf_counter() - started) * 1000,
            detail=detail,
        )
        attempts.append(attempt)
        self._metrics.record_attempt(attempt)

    @staticmethod
    def _describe(attempts: list[AttemptRecord]) -> str:
        return ", ".join(attempt.describe() for attempt in attempts)
