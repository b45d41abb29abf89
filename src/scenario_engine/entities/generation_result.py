"""Generation result domain entities."""

import uuid
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any

from .strategy import GenerationStrategy


@dataclass(frozen=True)
class TokenUsage:
    """Token counts reported (or estimated) for one provider call."""

    prompt: int = 0
    completion: int = 0
    total: int = 0

    @classmethod
    def of(cls, prompt: int, completion: int) -> "TokenUsage":
        """Build usage where the total is the sum of both parts."""
        return cls(prompt=prompt, completion=completion, total=prompt + completion)


@dataclass(frozen=True)
class ProviderResponse:
    """Successful output of a single provider call.

    Attributes:
        content: Generated text, already stripped
        provider_name: Registered provider name (e.g. "gemini")
        model_name: Model that produced the text
        token_usage: Token accounting for the call
    """

    content: str
    provider_name: str
    model_name: str
    token_usage: TokenUsage


def new_scenario_id() -> str:
    """Return a fresh scenario identifier, unrelated to the content."""
    return f"scenario_{uuid.uuid4().hex}"


@dataclass(frozen=True)
class GenerationResult:
    """A generated scenario as returned to callers and stored in the cache.

    Instances are never mutated. A cache hit is returned as a copy with
    ``served_from_cache`` set, keeping the original ``id``.

    Attributes:
        id: Unique identifier, e.g. ``scenario_3f2a...``
        topic: Trimmed topic as supplied by the caller
        content: Post-processed narrative text
        strategy: Strategy used to build the prompt
        provider_name: Provider that produced the text, or "fallback"
        model_name: Model that produced the text
        token_usage: Token accounting
        generated_at: UTC timestamp of generation
        served_from_cache: Whether this copy came from the cache
    """

    id: str
    topic: str
    content: str
    strategy: GenerationStrategy
    provider_name: str
    model_name: str
    token_usage: TokenUsage
    generated_at: datetime
    served_from_cache: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        data = asdict(self)
        data["strategy"] = self.strategy.value
        data["generated_at"] = self.generated_at.isoformat()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GenerationResult":
        """Rebuild a result from ``to_dict`` output.

        Raises:
            KeyError, ValueError, TypeError: If the payload is malformed
        """
        generated_at = datetime.fromisoformat(data["generated_at"])
        if generated_at.tzinfo is None:
            generated_at = generated_at.replace(tzinfo=timezone.utc)
        return cls(
            id=data["id"],
            topic=data["topic"],
            content=data["content"],
            strategy=GenerationStrategy(data["strategy"]),
            provider_name=data["provider_name"],
            model_name=data["model_name"],
            token_usage=TokenUsage(**data["token_usage"]),
            generated_at=generated_at,
            served_from_cache=bool(data.get("served_from_cache", False)),
        )
