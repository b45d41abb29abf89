"""Generation parameters domain entity."""

from dataclasses import dataclass, replace
from typing import Any

from .strategy import GenerationStrategy

MIN_TEMPERATURE = 0.1
MAX_TEMPERATURE = 2.0
MIN_MAX_TOKENS = 100
MAX_MAX_TOKENS = 2000


@dataclass(frozen=True)
class GenerationParams:
    """Sampling and caching options for one generation request.

    Attributes:
        temperature: Sampling temperature, 0.1 to 2.0
        max_tokens: Output budget, 100 to 2000 tokens
        top_p: Nucleus sampling mass, (0, 1]
        top_k: Top-k sampling cut-off, at least 1
        force_fresh: Bypass a live cache entry
        strategy: Use this strategy instead of classifying the topic
    """

    temperature: float = 0.8
    max_tokens: int = 1000
    top_p: float = 0.9
    top_k: int = 40
    force_fresh: bool = False
    strategy: GenerationStrategy | None = None

    def __post_init__(self) -> None:
        """Validate bounds after initialization."""
        if not MIN_TEMPERATURE <= self.temperature <= MAX_TEMPERATURE:
            raise ValueError(
                f"temperature must be between {MIN_TEMPERATURE} and {MAX_TEMPERATURE}, "
                f"got {self.temperature}"
            )
        if not MIN_MAX_TOKENS <= self.max_tokens <= MAX_MAX_TOKENS:
            raise ValueError(
                f"max_tokens must be between {MIN_MAX_TOKENS} and {MAX_MAX_TOKENS}, "
                f"got {self.max_tokens}"
            )
        if not 0 < self.top_p <= 1:
            raise ValueError(f"top_p must be in (0, 1], got {self.top_p}")
        if self.top_k < 1:
            raise ValueError(f"top_k must be at least 1, got {self.top_k}")

    def with_overrides(self, **overrides: Any) -> "GenerationParams":
        """Return a copy with the given fields replaced, skipping None values."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)
