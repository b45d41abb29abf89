"""Service layer for business logic.

This layer contains the generation pipeline and its collaborators.
Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Handler -> Orchestrator -> Repository
    (HTTP)  -> (Business)   -> (Data Access)

Usage:
    ```python
    from scenario_engine.services import ProviderRegistry, ScenarioCache, ScenarioOrchestrator

    orchestrator = ScenarioOrchestrator.create(
        registry=ProviderRegistry.from_settings(settings),
        cache=ScenarioCache.create(store=InMemoryScenarioRepository()),
    )
    ```
"""

from . import classifier, prompt_builder
from .fallback import StaticFallback
from .orchestrator import RANDOM_TOPICS, ScenarioOrchestrator, validate_topic
from .provider_registry import ProviderRegistry, build_provider
from .safety import SafetyFilter
from .scenario_cache import ScenarioCache, normalize_topic

__all__ = [
    "RANDOM_TOPICS",
    "ProviderRegistry",
    "SafetyFilter",
    "ScenarioCache",
    "ScenarioOrchestrator",
    "StaticFallback",
    "build_provider",
    "classifier",
    "normalize_topic",
    "prompt_builder",
    "validate_topic",
]
