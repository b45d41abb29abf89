from typing import Any

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware

from scenario_engine.config import Settings, settings
from scenario_engine.dto import (
    BatchGenerateRequest,
    BatchGenerateResponse,
    ClearCacheResponse,
    GenerateScenarioRequest,
    HealthCheckResponse,
    ProvidersResponse,
    RandomScenarioRequest,
    RegenerateScenarioRequest,
    ScenarioResponse,
    StatsResponse,
)
from scenario_engine.protocols import CacheStore
from scenario_engine.services import ProviderRegistry

from .dependencies import HandlerDep, lifespan

API_TITLE = "Scenario Generation API"
API_VERSION = "0.1.0"
API_DESCRIPTION = 'Generates "what if" scenarios with multi-provider fallback and caching'


def create_app(
    config: Settings | None = None,
    registry: ProviderRegistry | None = None,
    store: CacheStore | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Settings for the app. Defaults to the global settings.
        registry: Preset provider registry instead of one built from settings.
        store: Preset cache store instead of one built from settings.
    """
    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=API_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = config or settings
    app.state.provider_registry = registry
    app.state.cache_store = store

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "name": API_TITLE,
            "version": API_VERSION,
            "description": API_DESCRIPTION,
            "endpoints": {
                "scenarios": "/scenarios",
                "providers": "/providers",
                "stats": "/stats",
                "health": "/health",
                "docs": "/docs",
            },
        }

    @app.get("/health", response_model=HealthCheckResponse)
    async def health(handler: HandlerDep) -> HealthCheckResponse:
        """Report cache and provider reachability."""
        return await handler.health()

    @app.get("/providers", response_model=ProvidersResponse)
    async def providers(handler: HandlerDep) -> ProvidersResponse:
        """List providers in priority order with their availability."""
        return await handler.providers()

    @app.get("/stats", response_model=StatsResponse)
    async def stats(handler: HandlerDep) -> StatsResponse:
        return await handler.stats()

    @app.post("/scenarios", response_model=ScenarioResponse)
    async def generate(request: GenerateScenarioRequest, handler: HandlerDep) -> ScenarioResponse:
        """Generate a scenario for a topic, served from cache when possible."""
        return await handler.generate(request)

    @app.post("/scenarios/regenerate", response_model=ScenarioResponse)
    async def regenerate(
        request: RegenerateScenarioRequest, handler: HandlerDep
    ) -> ScenarioResponse:
        """Generate a new scenario, ignoring the cached one."""
        return await handler.regenerate(request)

    @app.post("/scenarios/random", response_model=ScenarioResponse)
    async def generate_random(
        handler: HandlerDep, request: RandomScenarioRequest | None = None
    ) -> ScenarioResponse:
        """Generate a scenario for a randomly picked sample topic."""
        return await handler.generate_random(request or RandomScenarioRequest())

    @app.post("/scenarios/batch", response_model=BatchGenerateResponse)
    async def generate_batch(
        request: BatchGenerateRequest, handler: HandlerDep
    ) -> BatchGenerateResponse:
        """Generate scenarios for up to 10 topics."""
        return await handler.generate_batch(request)

    @app.delete("/cache", response_model=ClearCacheResponse)
    async def clear_cache(
        handler: HandlerDep,
        topic: str = Query(..., description="Topic whose cached scenario is dropped"),
    ) -> ClearCacheResponse:
        return await handler.clear_cache(topic)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "scenario_engine.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
