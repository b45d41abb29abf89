"""Tests for domain entities."""

from dataclasses import FrozenInstanceError
from datetime import datetime, timezone

import pytest

from scenario_engine.entities import (
    BatchItem,
    GenerationParams,
    GenerationResult,
    GenerationStrategy,
    TokenUsage,
    new_scenario_id,
)
from scenario_engine.models import AttemptRecord, GenerationMetrics


@pytest.mark.parametrize(
    "kwargs",
    [
        {"temperature": 0.05},
        {"temperature": 2.1},
        {"max_tokens": 99},
        {"max_tokens": 2001},
        {"top_p": 0},
        {"top_p": 1.5},
        {"top_k": 0},
    ],
)
def test_params_bounds(kwargs):
    with pytest.raises(ValueError):
        GenerationParams(**kwargs)


def test_params_overrides_skip_none():
    params = GenerationParams().with_overrides(temperature=1.0, max_tokens=None)

    assert params.temperature == 1.0
    assert params.max_tokens == 1000


def test_params_are_frozen():
    with pytest.raises(FrozenInstanceError):
        GenerationParams().temperature = 1.0


def test_token_usage_of():
    assert TokenUsage.of(3, 4) == TokenUsage(prompt=3, completion=4, total=7)


def test_scenario_ids_are_unique():
    ids = {new_scenario_id() for _ in range(100)}

    assert len(ids) == 100
    assert all(scenario_id.startswith("scenario_") for scenario_id in ids)


def test_result_serialization_preserves_fields():
    result = GenerationResult(
        id="scenario_1",
        topic="Nếu như rồng có thật",
        content="Rồng bay khắp trời.",
        strategy=GenerationStrategy.FANTASY,
        provider_name="openai",
        model_name="gpt-3.5-turbo",
        token_usage=TokenUsage.of(5, 6),
        generated_at=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
    )

    data = result.to_dict()

    assert data["strategy"] == "fantasy"
    assert data["generated_at"] == "2024-01-02T03:04:05+00:00"
    assert GenerationResult.from_dict(data) == result


def test_result_from_dict_assumes_utc_for_naive_timestamps():
    data = {
        "id": "scenario_1",
        "topic": "Nếu như rồng có thật",
        "content": "Rồng bay khắp trời.",
        "strategy": "fantasy",
        "provider_name": "openai",
        "model_name": "gpt-3.5-turbo",
        "token_usage": {"prompt": 1, "completion": 2, "total": 3},
        "generated_at": "2024-01-02T03:04:05",
    }

    assert GenerationResult.from_dict(data).generated_at.tzinfo == timezone.utc


def test_batch_item_ok():
    assert BatchItem(index=0, topic="x", error="bad", error_code="VALIDATION_ERROR").ok is False


def test_metrics_rates():
    metrics = GenerationMetrics()
    assert metrics.hit_rate == 0.0
    assert metrics.avg_provider_time_ms == 0.0

    metrics.record_hit()
    metrics.record_miss()
    metrics.record_attempt(AttemptRecord(provider="a", outcome="TransientError", duration_ms=10))
    metrics.record_attempt(AttemptRecord(provider="b", outcome="success", duration_ms=30))

    assert metrics.hit_rate == 0.5
    assert metrics.avg_provider_time_ms == 20.0
    assert metrics.to_dict()["failures_by_provider"] == {"a": 1}


def test_attempt_record_describe():
    attempt = AttemptRecord(provider="gemini", outcome="AuthError", duration_ms=12.4, detail="bad key")

    assert attempt.describe() == "gemini=AuthError (12ms): bad key"
