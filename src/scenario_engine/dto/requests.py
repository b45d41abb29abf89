"""Request DTOs for API endpoints."""

from pydantic import BaseModel, Field

from scenario_engine.entities import GenerationStrategy


class GenerationOptions(BaseModel):
    """Optional sampling parameters shared by the generation endpoints.

    Unset fields fall back to the configured defaults.
    """

    temperature: float | None = Field(
        None,
        description="Sampling temperature (0.1-2.0, higher = more creative)",
        ge=0.1,
        le=2.0,
    )
    max_tokens: int | None = Field(
        None,
        description="Output budget in tokens",
        ge=100,
        le=2000,
    )
    top_p: float | None = Field(None, description="Nucleus sampling mass", gt=0.0, le=1.0)
    top_k: int | None = Field(None, description="Top-k sampling cut-off", ge=1)
    strategy: GenerationStrategy | None = Field(
        None,
        description="Use this strategy instead of classifying the topic",
    )


class GenerateScenarioRequest(GenerationOptions):
    """Request DTO for generating a scenario.

    Topic length is checked by the orchestrator (3-200 characters after
    trimming) so that the error carries its domain code.
    """

    topic: str = Field(..., description='The "what if" premise, e.g. "Nếu như con người có thể bay"')
    force_fresh: bool = Field(False, description="Bypass a cached scenario for this topic")


class RegenerateScenarioRequest(GenerationOptions):
    """Request DTO for regenerating a scenario (always bypasses the cache)."""

    topic: str = Field(..., description="The topic to generate a new scenario for")


class RandomScenarioRequest(GenerationOptions):
    """Request DTO for generating a scenario from a random sample topic."""


class BatchGenerateRequest(GenerationOptions):
    """Request DTO for generating scenarios for several topics."""

    topics: list[str] = Field(
        ...,
        description="Topics to generate (1-10)",
        min_length=1,
        max_length=10,
    )
    force_fresh: bool = Field(False, description="Bypass cached scenarios")
