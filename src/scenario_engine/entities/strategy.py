"""Generation strategy and orchestration stage enums."""

from enum import Enum


class GenerationStrategy(str, Enum):
    """Content-style category selected for a topic."""

    GENERAL = "general"
    HISTORICAL = "historical"
    SCIENTIFIC = "scientific"
    SOCIAL = "social"
    FANTASY = "fantasy"


class GenerationStage(str, Enum):
    """Stages a generation request moves through."""

    CACHE_CHECK = "cache_check"
    CLASSIFYING = "classifying"
    GENERATING = "generating"
    POST_PROCESSING = "post_processing"
    CACHING = "caching"
    DONE = "done"
    ERROR = "error"
