"""Response DTOs for API endpoints."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class TokenUsageItem(BaseModel):
    """Token accounting for one scenario."""

    prompt: int = Field(0, description="Prompt tokens", ge=0)
    completion: int = Field(0, description="Completion tokens", ge=0)
    total: int = Field(0, description="Total tokens", ge=0)


class ScenarioResponse(BaseModel):
    """Response DTO for a generated or cached scenario."""

    id: str = Field(..., description="Scenario identifier")
    topic: str = Field(..., description="Trimmed topic")
    content: str = Field(..., description="Scenario text")
    strategy: str = Field(..., description="Strategy used to build the prompt")
    provider: str = Field(..., description='Provider that produced the text, or "fallback"')
    model: str = Field(..., description="Model that produced the text")
    token_usage: TokenUsageItem = Field(..., description="Token accounting")
    generated_at: datetime = Field(..., description="UTC time of generation")
    served_from_cache: bool = Field(..., description="Whether the scenario came from the cache")


class BatchItemResponse(BaseModel):
    """Outcome of one topic in a batch."""

    index: int = Field(..., description="Position of the topic in the request", ge=0)
    topic: str = Field(..., description="Topic as submitted")
    success: bool = Field(..., description="Whether a scenario was produced")
    scenario: ScenarioResponse | None = Field(None, description="The scenario on success")
    error: str | None = Field(None, description="Error message on failure")
    error_code: str | None = Field(None, description="Error code on failure")


class BatchGenerateResponse(BaseModel):
    """Response DTO for batch generation."""

    items: list[BatchItemResponse] = Field(default_factory=list)
    succeeded: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)


class ProviderInfoItem(BaseModel):
    """Availability of one configured provider."""

    provider: str
    model: str
    priority: int = Field(..., ge=1)
    enabled: bool
    disabled_reason: str | None = None
    suspended_for_seconds: float = Field(0.0, ge=0.0)


class ProvidersResponse(BaseModel):
    """Response DTO for the provider listing."""

    providers: list[ProviderInfoItem] = Field(default_factory=list)
    fallback_enabled: bool


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'degraded'")
    cache: str = Field(..., description="Cache backend status")
    providers: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Per-provider reachability probes",
    )
    fallback_enabled: bool


class StatsResponse(BaseModel):
    """Response DTO for generation statistics."""

    metrics: dict[str, Any] = Field(..., description="Request, cache and provider counters")
    cache_ttl_seconds: int = Field(..., description="Cache entry time-to-live", ge=0)
    providers: list[str] = Field(default_factory=list, description="Providers in priority order")


class ClearCacheResponse(BaseModel):
    """Response DTO for clearing a topic's cached scenario."""

    success: bool = Field(..., description="Whether an entry was removed")
    topic: str
    message: str
