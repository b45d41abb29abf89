"""Shared fixtures for scenario engine tests."""

import asyncio

import pytest

from scenario_engine.entities import GenerationParams, ProviderResponse, TokenUsage
from scenario_engine.repositories import InMemoryScenarioRepository
from scenario_engine.services import (
    ProviderRegistry,
    SafetyFilter,
    ScenarioCache,
    ScenarioOrchestrator,
    StaticFallback,
)

SCENARIO_TEXT = (
    "Con người sẽ bay lượn trên bầu trời mỗi sáng. "
    "Những thành phố mới được xây dựng trên các tầng mây cao."
)
BLOCKED_KEYWORDS = ("bạo lực", "tự tử", "khủng bố", "ma túy")


class FakeProvider:
    """In-process GenerationProvider double with call accounting."""

    def __init__(
        self,
        name: str,
        content: str = SCENARIO_TEXT,
        error: Exception | None = None,
        delay: float = 0.0,
        model_name: str = "fake-model",
        call_log: list[str] | None = None,
    ) -> None:
        self._name = name
        self._model_name = model_name
        self.content = content
        self.error = error
        self.delay = delay
        self.calls = 0
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False
        self.last_params: GenerationParams | None = None
        self.last_system: str | None = None
        self.last_user: str | None = None
        self.call_log = call_log

    @property
    def name(self) -> str:
        return self._name

    @property
    def model_name(self) -> str:
        return self._model_name

    async def generate(self, system_instruction, user_instruction, params):
        self.calls += 1
        self.last_system = system_instruction
        self.last_user = user_instruction
        self.last_params = params
        if self.call_log is not None:
            self.call_log.append(self._name)

        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.error is not None:
                raise self.error
            return ProviderResponse(
                content=self.content,
                provider_name=self._name,
                model_name=self._model_name,
                token_usage=TokenUsage.of(12, 34),
            )
        finally:
            self.in_flight -= 1

    async def health_check(self):
        status = "healthy" if self.error is None else "unhealthy"
        return {"status": status, "provider": self._name, "model": self._model_name}

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_provider():
    """Return the FakeProvider class."""
    return FakeProvider


@pytest.fixture
def store():
    return InMemoryScenarioRepository()


@pytest.fixture
def make_orchestrator(store):
    """Build an orchestrator over fake providers and an in-memory store."""

    def _make(
        providers=(),
        fallback: StaticFallback | None = StaticFallback(),
        deadline_seconds: float = 5.0,
        scan_output: bool = False,
        cache_store=None,
        batch_concurrency: int = 3,
    ) -> ScenarioOrchestrator:
        return ScenarioOrchestrator(
            registry=ProviderRegistry(providers),
            cache=ScenarioCache(cache_store if cache_store is not None else store, ttl=3600, key_prefix="test"),
            safety=SafetyFilter(BLOCKED_KEYWORDS, scan_output=scan_output),
            fallback=fallback,
            deadline_seconds=deadline_seconds,
            batch_concurrency=batch_concurrency,
            quota_cooldown_seconds=60,
        )

    return _make
