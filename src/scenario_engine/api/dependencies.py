"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state
"""

from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from scenario_engine.config import settings
from scenario_engine.handlers import ScenarioHandler
from scenario_engine.log import get_logger
from scenario_engine.repositories import create_cache_store
from scenario_engine.services import ProviderRegistry, ScenarioCache, ScenarioOrchestrator

logger = get_logger(__name__)


def get_orchestrator(request: Request) -> ScenarioOrchestrator:
    """Dependency injection for ScenarioOrchestrator from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The ScenarioOrchestrator instance from app.state

    Raises:
        RuntimeError: If the orchestrator is not initialized
    """
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise RuntimeError("ScenarioOrchestrator not initialized. Check lifespan setup.")
    return orchestrator


def get_handler(request: Request) -> ScenarioHandler:
    """Dependency injection for ScenarioHandler from app.state.

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "scenario_handler", None)
    if handler is None:
        raise RuntimeError("ScenarioHandler not initialized. Check lifespan setup.")
    return handler


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes all layers and stores them in app.state:
    1. Cache store and provider registry (connections), unless preset
       on app.state (tests inject their own)
    2. Orchestrator (business logic) - app.state.orchestrator
    3. Handler (HTTP endpoints) - app.state.scenario_handler

    Connections are closed on shutdown; the orchestrator never owns them.
    """
    config = getattr(app.state, "settings", None) or settings

    store = getattr(app.state, "cache_store", None) or create_cache_store(config)
    registry = getattr(app.state, "provider_registry", None)
    if registry is None:
        registry = ProviderRegistry.from_settings(config)

    cache = ScenarioCache.create(
        store=store,
        ttl=config.cache_ttl,
        key_prefix=config.cache_key_prefix,
    )
    orchestrator = ScenarioOrchestrator.create(registry=registry, cache=cache, config=config)

    app.state.cache_store = store
    app.state.provider_registry = registry
    app.state.orchestrator = orchestrator
    app.state.scenario_handler = ScenarioHandler(orchestrator=orchestrator)

    if await cache.is_healthy():
        logger.info("Cache backend %s ready (ttl=%ss)", config.cache_backend, cache.ttl)
    else:
        logger.warning(
            "Cache backend %s unreachable; requests will run without caching",
            config.cache_backend,
        )
    logger.info(
        "Scenario service started with providers %s, fallback %s",
        registry.names or "none",
        "enabled" if orchestrator.fallback_enabled else "disabled",
    )

    yield

    await registry.close()
    await store.close()
    del app.state.scenario_handler
    del app.state.orchestrator
    del app.state.provider_registry
    del app.state.cache_store
    logger.info("Scenario service shut down")


# Type aliases for cleaner dependency injection
HandlerDep = Annotated[ScenarioHandler, Depends(get_handler)]
OrchestratorDep = Annotated[ScenarioOrchestrator, Depends(get_orchestrator)]
