"""Batch generation item domain entity."""

from dataclasses import dataclass

from .generation_result import GenerationResult


@dataclass(frozen=True)
class BatchItem:
    """Outcome of one topic inside a batch request.

    Exactly one of ``result`` or ``error`` is set.
    """

    index: int
    topic: str
    result: GenerationResult | None = None
    error: str | None = None
    error_code: str | None = None

    @property
    def ok(self) -> bool:
        return self.result is not None
