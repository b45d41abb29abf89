#!/usr/bin/env python3
"""
Demo script for the scenario engine.

Runs the full generation flow with the in-memory cache and whatever
providers are configured in the environment. With no API keys set, every
scenario comes from the static fallback.
"""

import asyncio
import time

from scenario_engine.config import Settings, settings
from scenario_engine.errors import PolicyViolation, ScenarioValidationError
from scenario_engine.repositories import InMemoryScenarioRepository
from scenario_engine.services import (
    ProviderRegistry,
    ScenarioCache,
    ScenarioOrchestrator,
    classifier,
)


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def demo_classifier() -> None:
    """Show which strategy each topic gets."""
    print_section("Topic Classification")

    topics = [
        "Nếu như con người có thể bay",
        "Nếu như Thế chiến thứ hai kết thúc sớm hơn",
        "Nếu như robot thông minh hơn con người",
        "Nếu như giáo dục hoàn toàn miễn phí",
        "Nếu như rồng có thật",
    ]
    for topic in topics:
        print(f"  {classifier.classify(topic).value:<11} {topic}")


async def demo_generation(orchestrator: ScenarioOrchestrator) -> None:
    """Generate a scenario, then fetch it again from the cache."""
    print_section("Generation and Caching")

    topic = "Nếu như con người có thể bay"
    for attempt in ("first request", "second request"):
        start = time.perf_counter()
        result = await orchestrator.generate(topic)
        duration = (time.perf_counter() - start) * 1000

        print(f"\n  {attempt}: {duration:.1f}ms")
        print(f"  id: {result.id}")
        print(f"  provider: {result.provider_name} ({result.model_name})")
        print(f"  strategy: {result.strategy.value}")
        print(f"  served from cache: {result.served_from_cache}")
        print(f"  content: {result.content[:120]}...")


async def demo_rejections(orchestrator: ScenarioOrchestrator) -> None:
    """Show inputs that are refused before any provider is called."""
    print_section("Rejected Topics")

    for topic in ("ab", "Nếu như bạo lực biến mất"):
        try:
            await orchestrator.generate(topic)
        except (ScenarioValidationError, PolicyViolation) as e:
            print(f"  {topic!r}: {e.code} - {e.message}")


async def demo_batch(orchestrator: ScenarioOrchestrator) -> None:
    """Generate several topics at once."""
    print_section("Batch Generation")

    items = await orchestrator.generate_batch(
        [
            "Nếu như động vật có thể nói chuyện",
            "Nếu như Internet không tồn tại",
            "x",
        ]
    )
    for item in items:
        if item.ok:
            print(f"  ✓ {item.topic} -> {item.result.provider_name}")
        else:
            print(f"  ✗ {item.topic!r} -> {item.error_code}")


async def main() -> None:
    """Run all demos."""
    print("\n" + "=" * 70)
    print("  SCENARIO ENGINE DEMO")
    print("=" * 70)

    config = Settings(cache_backend="memory", provider_order=settings.provider_order)
    registry = ProviderRegistry.from_settings(config)
    store = InMemoryScenarioRepository()
    orchestrator = ScenarioOrchestrator.create(
        registry=registry,
        cache=ScenarioCache.create(store=store, ttl=config.cache_ttl),
        config=config,
    )

    try:
        demo_classifier()
        await demo_generation(orchestrator)
        await demo_rejections(orchestrator)
        await demo_batch(orchestrator)

        print_section("Metrics")
        for name, value in orchestrator.metrics.to_dict().items():
            print(f"  {name}: {value}")
    finally:
        await registry.close()
        await store.close()

    print("\n" + "=" * 70)
    print("  Demo completed!")
    print("=" * 70 + "\n")


if __name__ == "__main__":
    asyncio.run(main())
