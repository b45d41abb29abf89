"""Scenario Engine - "What if" scenario generation with multi-provider fallback.

This package provides a layered architecture for scenario generation:

Layers:
    - protocols: Interface contracts (CacheStore, GenerationProvider)
    - repositories: Data access implementations (Redis, in-memory, LLM HTTP APIs)
    - services: Business logic (classifier, prompts, safety, cache, orchestrator)
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from scenario_engine.services import ProviderRegistry, ScenarioCache, ScenarioOrchestrator

    orchestrator = ScenarioOrchestrator.create(
        registry=ProviderRegistry.from_settings(settings),
        cache=ScenarioCache.create(store=create_cache_store(settings)),
    )
    result = await orchestrator.generate("Nếu như con người có thể bay")
    ```

For HTTP API:
    ```python
    from scenario_engine.api.app import app
    ```
"""

from scenario_engine.config import get_redis_client, settings
from scenario_engine.entities import GenerationParams, GenerationResult, GenerationStrategy
from scenario_engine.errors import (
    GenerationTimeout,
    PolicyViolation,
    ProviderExhausted,
    ScenarioError,
    ScenarioValidationError,
)
from scenario_engine.protocols import CacheStore, GenerationProvider
from scenario_engine.repositories import (
    InMemoryScenarioRepository,
    RedisScenarioRepository,
    create_cache_store,
)
from scenario_engine.services import ProviderRegistry, ScenarioCache, ScenarioOrchestrator

__all__ = [
    # Configuration
    "settings",
    "get_redis_client",
    # Protocols (interfaces)
    "CacheStore",
    "GenerationProvider",
    # Services (business logic)
    "ProviderRegistry",
    "ScenarioCache",
    "ScenarioOrchestrator",
    # Repositories (data access)
    "InMemoryScenarioRepository",
    "RedisScenarioRepository",
    "create_cache_store",
    # Entities (domain models)
    "GenerationParams",
    "GenerationResult",
    "GenerationStrategy",
    # Errors
    "ScenarioError",
    "ScenarioValidationError",
    "PolicyViolation",
    "GenerationTimeout",
    "ProviderExhausted",
]
