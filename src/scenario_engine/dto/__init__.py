"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract.
They are used for request/response validation and serialization.

Internal domain logic should use entities from the entities package.
"""

from .requests import (
    BatchGenerateRequest,
    GenerateScenarioRequest,
    GenerationOptions,
    RandomScenarioRequest,
    RegenerateScenarioRequest,
)
from .responses import (
    BatchGenerateResponse,
    BatchItemResponse,
    ClearCacheResponse,
    HealthCheckResponse,
    ProviderInfoItem,
    ProvidersResponse,
    ScenarioResponse,
    StatsResponse,
    TokenUsageItem,
)

__all__ = [
    "GenerationOptions",
    "GenerateScenarioRequest",
    "RegenerateScenarioRequest",
    "RandomScenarioRequest",
    "BatchGenerateRequest",
    "TokenUsageItem",
    "ScenarioResponse",
    "BatchItemResponse",
    "BatchGenerateResponse",
    "ProviderInfoItem",
    "ProvidersResponse",
    "HealthCheckResponse",
    "StatsResponse",
    "ClearCacheResponse",
]
