"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by services
and repositories. They are NOT used for API contracts - use DTOs
from the dto package for that.
"""

from .batch_item import BatchItem
from .generation_params import GenerationParams
from .generation_result import GenerationResult, ProviderResponse, TokenUsage, new_scenario_id
from .prompt_spec import PromptSpec
from .strategy import GenerationStage, GenerationStrategy

__all__ = [
    "BatchItem",
    "GenerationParams",
    "GenerationResult",
    "GenerationStage",
    "GenerationStrategy",
    "PromptSpec",
    "ProviderResponse",
    "TokenUsage",
    "new_scenario_id",
]
