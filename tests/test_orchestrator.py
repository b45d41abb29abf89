"""Tests for the scenario orchestrator."""

import asyncio
from unittest.mock import AsyncMock

import httpx
import pytest

from scenario_engine.entities import GenerationParams, GenerationStrategy
from scenario_engine.errors import (
    AuthError,
    CacheStoreError,
    ContentFiltered,
    EmptyResponse,
    GenerationTimeout,
    PolicyViolation,
    ProviderExhausted,
    QuotaExceeded,
    ScenarioValidationError,
    TransientError,
)
from scenario_engine.repositories import InMemoryScenarioRepository, OpenAIProvider
from scenario_engine.services import RANDOM_TOPICS
from scenario_engine.services.fallback import FALLBACK_MODEL, FALLBACK_PROVIDER

TOPIC = "Nếu như con người có thể bay"


@pytest.mark.asyncio
async def test_example_topic_without_providers_uses_fallback(make_orchestrator):
    orchestrator = make_orchestrator(providers=[])

    result = await orchestrator.generate(TOPIC)

    assert result.strategy == GenerationStrategy.GENERAL
    assert result.served_from_cache is False
    assert result.content
    assert result.provider_name == FALLBACK_PROVIDER
    assert result.model_name == FALLBACK_MODEL
    assert result.token_usage.total == 0
    assert result.id.startswith("scenario_")


@pytest.mark.asyncio
async def test_blocked_topic_never_reaches_a_provider(make_orchestrator, fake_provider):
    provider = fake_provider("gemini")
    orchestrator = make_orchestrator(providers=[provider])

    with pytest.raises(PolicyViolation) as exc_info:
        await orchestrator.generate("Nếu như BẠO LỰC biến mất")

    assert exc_info.value.keyword == "bạo lực"
    assert exc_info.value.code == "POLICY_VIOLATION"
    assert provider.calls == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("topic", ["", "ab", "   ab   ", "x" * 201, None, 42])
async def test_invalid_topic_is_rejected(make_orchestrator, fake_provider, topic):
    provider = fake_provider("gemini")
    orchestrator = make_orchestrator(providers=[provider])

    with pytest.raises(ScenarioValidationError):
        await orchestrator.generate(topic)

    assert provider.calls == 0


@pytest.mark.asyncio
async def test_topic_is_trimmed(make_orchestrator, fake_provider):
    orchestrator = make_orchestrator(providers=[fake_provider("gemini")])

    result = await orchestrator.generate(f"   {TOPIC}  ")

    assert result.topic == TOPIC


@pytest.mark.asyncio
async def test_second_request_is_served_from_cache(make_orchestrator, fake_provider):
    provider = fake_provider("gemini")
    orchestrator = make_orchestrator(providers=[provider])

    first = await orchestrator.generate(TOPIC)
    second = await orchestrator.generate(TOPIC.upper() + "  ")

    assert first.served_from_cache is False
    assert second.served_from_cache is True
    assert second.id == first.id
    assert second.content == first.content
    assert provider.calls == 1


@pytest.mark.asyncio
async def test_expired_cache_entry_is_regenerated(make_orchestrator, fake_provider):
    clock = [1000.0]
    provider = fake_provider("gemini")
    orchestrator = make_orchestrator(
        providers=[provider],
        cache_store=InMemoryScenarioRepository(timer=lambda: clock[0]),
    )

    first = await orchestrator.generate(TOPIC)
    clock[0] += 3601
    second = await orchestrator.generate(TOPIC)

    assert second.served_from_cache is False
    assert second.id != first.id
    assert provider.calls == 2
    assert orchestrator.metrics.cache_misses == 2


@pytest.mark.asyncio
async def test_force_fresh_bypasses_live_cache_entry(make_orchestrator, fake_provider):
    provider = fake_provider("gemini")
    orchestrator = make_orchestrator(providers=[provider])

    first = await orchestrator.generate(TOPIC)
    fresh = await orchestrator.generate(TOPIC, GenerationParams(force_fresh=True))

    assert fresh.served_from_cache is False
    assert fresh.id != first.id
    assert provider.calls == 2

    # The fresh result replaced the cached one
    cached = await orchestrator.generate(TOPIC)
    assert cached.id == fresh.id


@pytest.mark.asyncio
async def test_regenerate_produces_new_id(make_orchestrator, fake_provider):
    orchestrator = make_orchestrator(providers=[fake_provider("gemini")])

    first = await orchestrator.generate(TOPIC)
    again = await orchestrator.regenerate(TOPIC)

    assert again.id != first.id
    assert again.served_from_cache is False


@pytest.mark.asyncio
async def test_falls_through_to_next_provider_after_transient_failure(
    make_orchestrator, fake_provider
):
    call_log: list[str] = []
    failing = fake_provider("a", error=TransientError("a", "HTTP 503"), call_log=call_log)
    working = fake_provider("b", call_log=call_log)
    orchestrator = make_orchestrator(providers=[failing, working])

    result = await orchestrator.generate(TOPIC)

    assert result.provider_name == "b"
    assert call_log == ["a", "b"]
    assert failing.calls == 1
    assert working.calls == 1


@pytest.mark.asyncio
async def test_malformed_provider_body_moves_to_next_provider(make_orchestrator, fake_provider):
    body = {
        "choices": [{"message": {"content": "Một thế giới khác."}, "finish_reason": "stop"}],
        "usage": {"prompt_tokens": None, "completion_tokens": 5, "total_tokens": 5},
    }
    client = httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=body))
    )
    broken = OpenAIProvider.create(
        api_key="sk-test", base_url="https://openai.test/v1", client=client
    )
    backup = fake_provider("b")
    orchestrator = make_orchestrator(providers=[broken, backup])

    result = await orchestrator.generate(TOPIC)

    assert result.provider_name == "b"
    assert backup.calls == 1
    assert orchestrator.metrics.failures_by_provider == {"openai": 1}
    await broken.close()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        ContentFiltered("a", "blocked"),
        EmptyResponse("a", "no text"),
        TransientError("a", "timeout"),
    ],
)
async def test_each_failure_kind_moves_to_next_provider(make_orchestrator, fake_provider, error):
    failing = fake_provider("a", error=error)
    working = fake_provider("b")
    orchestrator = make_orchestrator(providers=[failing, working])

    result = await orchestrator.generate(TOPIC)

    assert result.provider_name == "b"
    assert failing.calls == 1


@pytest.mark.asyncio
async def test_total_exhaustion_returns_static_fallback(make_orchestrator, fake_provider):
    providers = [
        fake_provider("a", error=TransientError("a", "down")),
        fake_provider("b", error=QuotaExceeded("b", "quota")),
        fake_provider("c", error=ContentFiltered("c", "filtered")),
    ]
    orchestrator = make_orchestrator(providers=providers)

    result = await orchestrator.generate(TOPIC)

    assert result.provider_name == FALLBACK_PROVIDER
    assert "con người có thể bay" in result.content
    assert all(provider.calls == 1 for provider in providers)
    assert orchestrator.metrics.fallback_results == 1


@pytest.mark.asyncio
async def test_fallback_result_is_cached(make_orchestrator):
    orchestrator = make_orchestrator(providers=[])

    first = await orchestrator.generate(TOPIC)
    second = await orchestrator.generate(TOPIC)

    assert second.served_from_cache is True
    assert second.id == first.id


@pytest.mark.asyncio
async def test_exhaustion_without_fallback_raises(make_orchestrator, fake_provider):
    orchestrator = make_orchestrator(
        providers=[fake_provider("a", error=TransientError("a", "down"))],
        fallback=None,
    )

    with pytest.raises(ProviderExhausted):
        await orchestrator.generate(TOPIC)


@pytest.mark.asyncio
async def test_deadline_raises_timeout_without_fallback(make_orchestrator, fake_provider, store):
    slow = fake_provider("slow", delay=1.0)
    backup = fake_provider("backup")
    orchestrator = make_orchestrator(providers=[slow, backup], deadline_seconds=0.05)

    with pytest.raises(GenerationTimeout) as exc_info:
        await orchestrator.generate(TOPIC)

    assert exc_info.value.code == "GENERATION_TIMEOUT"
    assert slow.in_flight == 0
    assert backup.calls == 0
    assert orchestrator.metrics.fallback_results == 0
    assert orchestrator.metrics.timeouts == 1
    assert len(store) == 0


@pytest.mark.asyncio
async def test_deadline_covers_the_whole_provider_pass(make_orchestrator, fake_provider):
    providers = [
        fake_provider("a", delay=0.04, error=TransientError("a", "slow failure")),
        fake_provider("b", delay=0.04, error=TransientError("b", "slow failure")),
        fake_provider("c", delay=0.04),
    ]
    orchestrator = make_orchestrator(providers=providers, deadline_seconds=0.1)

    with pytest.raises(GenerationTimeout):
        await orchestrator.generate(TOPIC)


@pytest.mark.asyncio
async def test_auth_error_disables_provider_for_later_requests(make_orchestrator, fake_provider):
    bad_key = fake_provider("a", error=AuthError("a", "invalid key", status_code=401))
    working = fake_provider("b")
    orchestrator = make_orchestrator(providers=[bad_key, working])

    await orchestrator.generate(TOPIC)
    await orchestrator.regenerate(TOPIC)

    assert bad_key.calls == 1
    assert working.calls == 2
    info = {item["provider"]: item for item in orchestrator.provider_info()}
    assert info["a"]["enabled"] is False
    assert info["b"]["enabled"] is True


@pytest.mark.asyncio
async def test_quota_error_suspends_provider(make_orchestrator, fake_provider):
    limited = fake_provider("a", error=QuotaExceeded("a", "quota", status_code=429))
    working = fake_provider("b")
    orchestrator = make_orchestrator(providers=[limited, working])

    await orchestrator.generate(TOPIC)
    await orchestrator.regenerate(TOPIC)

    assert limited.calls == 1
    assert orchestrator.provider_info()[0]["suspended_for_seconds"] > 0


@pytest.mark.asyncio
async def test_content_is_post_processed(make_orchestrator, fake_provider):
    provider = fake_provider(
        "gemini",
        content="Con người bay   lượn khắp nơi.\n\nThành phố trên mây xuất hiện!  Và rồi",
    )
    orchestrator = make_orchestrator(providers=[provider])

    result = await orchestrator.generate(TOPIC)

    assert result.content == "Con người bay lượn khắp nơi. Thành phố trên mây xuất hiện!"


@pytest.mark.asyncio
async def test_prompt_uses_classified_strategy(make_orchestrator, fake_provider):
    provider = fake_provider("gemini")
    orchestrator = make_orchestrator(providers=[provider])

    result = await orchestrator.generate("Nếu như robot thông minh hơn con người")

    assert result.strategy == GenerationStrategy.SCIENTIFIC
    assert "robot thông minh hơn con người" in provider.last_user
    assert "QUAN TRỌNG" in provider.last_system


@pytest.mark.asyncio
async def test_strategy_override_skips_classification(make_orchestrator, fake_provider):
    orchestrator = make_orchestrator(providers=[fake_provider("gemini")])

    result = await orchestrator.generate(
        TOPIC, GenerationParams(strategy=GenerationStrategy.FANTASY)
    )

    assert result.strategy == GenerationStrategy.FANTASY


@pytest.mark.asyncio
async def test_params_reach_the_provider(make_orchestrator, fake_provider):
    provider = fake_provider("gemini")
    orchestrator = make_orchestrator(providers=[provider])
    params = orchestrator.params_from_options(temperature=1.2, max_tokens=500, top_k=None)

    await orchestrator.generate(TOPIC, params)

    assert provider.last_params.temperature == 1.2
    assert provider.last_params.max_tokens == 500
    assert provider.last_params.top_k == 40


def test_invalid_options_raise_validation_error(make_orchestrator):
    orchestrator = make_orchestrator()

    with pytest.raises(ScenarioValidationError):
        orchestrator.params_from_options(temperature=5.0)
    with pytest.raises(ScenarioValidationError):
        orchestrator.params_from_options(unknown_option=1)


@pytest.mark.asyncio
async def test_output_scanning_disabled_by_default(make_orchestrator, fake_provider):
    provider = fake_provider("gemini", content="Một thế giới không còn ma túy nữa rồi.")
    orchestrator = make_orchestrator(providers=[provider])

    result = await orchestrator.generate(TOPIC)

    assert result.provider_name == "gemini"


@pytest.mark.asyncio
async def test_output_scanning_rejects_blocked_output(make_orchestrator, fake_provider):
    tainted = fake_provider("a", content="Một thế giới không còn ma túy nữa rồi.")
    clean = fake_provider("b")
    orchestrator = make_orchestrator(providers=[tainted, clean], scan_output=True)

    result = await orchestrator.generate(TOPIC)

    assert result.provider_name == "b"
    assert tainted.calls == 1


@pytest.mark.asyncio
async def test_cache_store_outage_never_fails_request(make_orchestrator, fake_provider):
    broken_store = AsyncMock()
    broken_store.get.side_effect = CacheStoreError("connection refused")
    broken_store.set_with_ttl.side_effect = CacheStoreError("connection refused")
    provider = fake_provider("gemini")
    orchestrator = make_orchestrator(providers=[provider], cache_store=broken_store)

    first = await orchestrator.generate(TOPIC)
    second = await orchestrator.generate(TOPIC)

    assert first.served_from_cache is False
    assert second.served_from_cache is False
    assert provider.calls == 2


@pytest.mark.asyncio
async def test_clear_cache_forces_new_generation(make_orchestrator, fake_provider):
    orchestrator = make_orchestrator(providers=[fake_provider("gemini")])

    first = await orchestrator.generate(TOPIC)
    assert await orchestrator.clear_cache(TOPIC) is True
    assert await orchestrator.clear_cache(TOPIC) is False
    second = await orchestrator.generate(TOPIC)

    assert second.id != first.id
    assert second.served_from_cache is False


@pytest.mark.asyncio
async def test_generate_random_picks_sample_topic(make_orchestrator, fake_provider):
    provider = fake_provider("gemini")
    orchestrator = make_orchestrator(providers=[provider])

    result = await orchestrator.generate_random()

    assert result.topic in RANDOM_TOPICS
    assert result.served_from_cache is False
    assert provider.last_params.force_fresh is True


@pytest.mark.asyncio
async def test_batch_isolates_item_failures(make_orchestrator, fake_provider):
    orchestrator = make_orchestrator(providers=[fake_provider("gemini")])

    items = await orchestrator.generate_batch([TOPIC, "Nếu như khủng bố biến mất", "ab"])

    assert [item.index for item in items] == [0, 1, 2]
    assert items[0].ok
    assert items[0].result.topic == TOPIC
    assert not items[1].ok
    assert items[1].error_code == "POLICY_VIOLATION"
    assert not items[2].ok
    assert items[2].error_code == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_batch_limits_concurrency(make_orchestrator, fake_provider):
    provider = fake_provider("gemini", delay=0.02)
    orchestrator = make_orchestrator(providers=[provider], batch_concurrency=3)
    topics = [f"Nếu như thành phố số {i} có thể bay" for i in range(8)]

    items = await orchestrator.generate_batch(topics)

    assert all(item.ok for item in items)
    assert provider.calls == 8
    assert provider.max_in_flight <= 3


@pytest.mark.asyncio
@pytest.mark.parametrize("count", [0, 11])
async def test_batch_size_is_bounded(make_orchestrator, count):
    orchestrator = make_orchestrator()

    with pytest.raises(ScenarioValidationError):
        await orchestrator.generate_batch([TOPIC] * count)


@pytest.mark.asyncio
async def test_concurrent_requests_share_registry_state(make_orchestrator, fake_provider):
    bad_key = fake_provider("a", error=AuthError("a", "invalid key"))
    working = fake_provider("b", delay=0.01)
    orchestrator = make_orchestrator(providers=[bad_key, working])

    results = await asyncio.gather(
        *(orchestrator.regenerate(f"Nếu như ngày thứ {i} dài gấp đôi") for i in range(5))
    )

    assert all(result.provider_name == "b" for result in results)
    assert bad_key.calls <= 5
    assert orchestrator.provider_info()[0]["enabled"] is False


@pytest.mark.asyncio
async def test_health_check_reports_cache_and_providers(make_orchestrator, fake_provider):
    orchestrator = make_orchestrator(providers=[fake_provider("gemini")])

    report = await orchestrator.health_check()

    assert report["status"] == "healthy"
    assert report["cache"] == "healthy"
    assert report["providers"][0]["provider"] == "gemini"
    assert report["fallback_enabled"] is True


@pytest.mark.asyncio
async def test_health_check_degraded_without_providers(make_orchestrator):
    report = await make_orchestrator(providers=[]).health_check()

    assert report["status"] == "degraded"


@pytest.mark.asyncio
async def test_metrics_track_requests(make_orchestrator, fake_provider):
    failing = fake_provider("a", error=TransientError("a", "down"))
    orchestrator = make_orchestrator(providers=[failing, fake_provider("b")])

    await orchestrator.generate(TOPIC)
    await orchestrator.generate(TOPIC)
    with pytest.raises(PolicyViolation):
        await orchestrator.generate("tự tử")

    metrics = orchestrator.metrics.to_dict()
    assert metrics["total_requests"] == 3
    assert metrics["cache_hits"] == 1
    assert metrics["cache_misses"] == 1
    assert metrics["rejected"] == 1
    assert metrics["provider_calls"] == 2
    assert metrics["successes_by_provider"] == {"b": 1}
    assert metrics["failures_by_provider"] == {"a": 1}
