from dataclasses import dataclass, field


@dataclass(frozen=True)
class AttemptRecord:
    """Outcome of one provider attempt within a request."""

    provider: str
    outcome: str
    duration_ms: float = 0.0
    detail: str | None = None

    def describe(self) -> str:
        text = f"{self.provider}={self.outcome} ({self.duration_ms:.0f}ms)"
        if self.detail:
            text += f": {self.detail}"
        return text


@dataclass
class GenerationMetrics:
    """Track counters for generation requests."""

    total_requests: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    fallback_results: int = 0
    timeouts: int = 0
    rejected: int = 0
    provider_calls: int = 0
    total_provider_time_ms: float = 0.0
    successes_by_provider: dict[str, int] = field(default_factory=dict)
    failures_by_provider: dict[str, int] = field(default_factory=dict)

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate over cache lookups."""
        lookups = self.cache_hits + self.cache_misses
        if lookups == 0:
            return 0.0
        return self.cache_hits / lookups

    @property
    def avg_provider_time_ms(self) -> float:
        """Calculate average provider call duration."""
        if self.provider_calls == 0:
            return 0.0
        return self.total_provider_time_ms / self.provider_calls

    def record_request(self) -> None:
        self.total_requests += 1

    def record_rejection(self) -> None:
        """Record a request refused by validation or policy."""
        self.rejected += 1

    def record_hit(self) -> None:
        self.cache_hits += 1

    def record_miss(self) -> None:
        self.cache_misses += 1

    def record_attempt(self, attempt: AttemptRecord) -> None:
        """Record one provider call and its outcome."""
        self.provider_calls += 1
        self.total_provider_time_ms += attempt.duration_ms
        counters = (
            self.successes_by_provider if attempt.outcome == "success" else self.failures_by_provider
        )
        counters[attempt.provider] = counters.get(attempt.provider, 0) + 1

    def record_fallback(self) -> None:
        self.fallback_results += 1

    def record_timeout(self) -> None:
        self.timeouts += 1

    def to_dict(self) -> dict[str, float | int | dict[str, int]]:
        """Convert metrics to dictionary."""
        return {
            "total_requests": self.total_requests,
            "cache_hits": self.cache_hits,
            "cache_misses": self.cache_misses,
            "hit_rate": self.hit_rate,
            "fallback_results": self.fallback_results,
            "timeouts": self.timeouts,
            "rejected": self.rejected,
            "provider_calls": self.provider_calls,
            "avg_provider_time_ms": self.avg_provider_time_ms,
            "successes_by_provider": dict(self.successes_by_provider),
            "failures_by_provider": dict(self.failures_by_provider),
        }
