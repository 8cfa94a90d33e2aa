#!/usr/bin/env python3
"""
Demo script for the OptiLLM cache.

Walks through a miss, a hit, a stale entry, a policy override, tenant
isolation, suggestions and the expiry sweep against a live Redis Stack,
using the local hashing embedding and the echo producer.
"""

import asyncio
import time

from optillm.config import EngineConfig, get_redis_client, get_settings
from optillm.entities import CachePolicy, CaptureRequest, RecordMetadata, SuggestQuery
from optillm.exceptions import OptiLLMError
from optillm.repositories import EchoCompletionProvider, LocalEmbeddingProvider, RedisVectorStore
from optillm.services import CacheService, SuggestionService
from optillm.utils import configure_logging


class DemoClock:
    """Wall clock that can be pushed forward to show expiry without waiting."""

    def __init__(self) -> None:
        self.offset = 0.0

    def __call__(self) -> float:
        return time.time() + self.offset


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


def print_result(prompt: str, result) -> None:
    status = "✓ CACHE HIT" if result.cached else "✗ Cache miss"
    print(f"\n  Prompt: {prompt}")
    print(f"  {status}")
    if result.score is not None:
        print(f"  Similarity: {result.score:.2%}")
    print(f"  Response: {result.payload[:100]}")


async def demo_capture(cache: CacheService, producer: EchoCompletionProvider, clock: DemoClock) -> None:
    """Demonstrate miss, hit and stale lookups."""
    print_section("Capture: miss, hit, stale")

    metadata = RecordMetadata(provider=producer.provider, model=producer.model_name, tenant_id="acme")
    prompt = "What is the capital of France?"

    for attempt in ("first call", "repeat call"):
        print(f"\n🔍 {attempt}")
        result = await cache.capture(
            CaptureRequest(prompt=prompt, metadata=metadata),
            lambda: producer.complete(prompt),
        )
        print_result(prompt, result)

    print("\n⏩ Advancing the clock past the TTL...")
    clock.offset += cache.config.default_ttl_seconds + 1
    result = await cache.capture(
        CaptureRequest(prompt=prompt, metadata=metadata),
        lambda: producer.complete(prompt),
    )
    print_result(prompt, result)


async def demo_policy(cache: CacheService, producer: EchoCompletionProvider) -> None:
    """Demonstrate per-request policy overrides."""
    print_section("Policy overrides")

    metadata = RecordMetadata(provider=producer.provider, model=producer.model_name, tenant_id="acme")
    prompt = "what is the capital of spain"
    similar = "what is the capital of spain today"

    await cache.capture(CaptureRequest(prompt=prompt, metadata=metadata), lambda: producer.complete(prompt))

    for threshold in (0.95, 0.75):
        result = await cache.capture(
            CaptureRequest(prompt=similar, metadata=metadata, policy=CachePolicy(min_similarity=threshold)),
            lambda: producer.complete(similar),
        )
        print(f"\n  min_similarity={threshold}")
        print_result(similar, result)


async def demo_tenants(cache: CacheService, producer: EchoCompletionProvider) -> None:
    """Demonstrate that tenants never share entries."""
    print_section("Tenant isolation")

    prompt = "Summarise our refund policy"
    for tenant_id in ("acme", "globex", "acme"):
        metadata = RecordMetadata(provider=producer.provider, model=producer.model_name, tenant_id=tenant_id)
        result = await cache.capture(
            CaptureRequest(prompt=prompt, metadata=metadata),
            lambda: producer.complete(prompt),
        )
        print(f"\n  Tenant: {tenant_id}")
        print_result(prompt, result)


async def demo_suggestions(suggestions: SuggestionService) -> None:
    """Demonstrate typeahead over cached prompts."""
    print_section("Suggestions")

    text = "capital of"
    items = await suggestions.suggest(SuggestQuery(text=text, tenant_id="acme", min_similarity=0.3))

    print(f"\n💡 Suggestions for '{text}':")
    if not items:
        print("  (none)")
    for item in items:
        print(f"  {item.score:.2%}  {item.prompt}")


async def demo_sweep(cache: CacheService, clock: DemoClock) -> None:
    """Demonstrate the expiry sweep."""
    print_section("Expiry sweep")

    before = await cache.repository.count()
    clock.offset += cache.config.default_ttl_seconds + 1
    result = await cache.sweep_expired()
    after = await cache.repository.count()

    print(f"\n🧹 Entries before: {before}, removed: {result.removed}, after: {after}")
    if not result.ok:
        print(f"  ⚠ Sweep failed: {result.error}")


async def run() -> None:
    settings = get_settings()
    configure_logging(settings.log_level, json_logs=False)

    clock = DemoClock()
    config = EngineConfig(collection_name="optillm_demo", default_ttl_seconds=60)
    repository = RedisVectorStore(
        redis_client=get_redis_client(settings),
        collection_name=config.collection_name,
        clock=clock,
    )
    cache = CacheService.create(
        repository=repository,
        embedding_provider=LocalEmbeddingProvider.create(),
        config=config,
        clock=clock,
    )
    producer = EchoCompletionProvider()

    try:
        dimension = await cache.initialize()
        print(f"\n📊 Collection: {config.collection_name}, dimension: {dimension}")

        await demo_capture(cache, producer, clock)
        await demo_policy(cache, producer)
        await demo_tenants(cache, producer)
        await demo_suggestions(SuggestionService(repository=repository, embeddings=cache.embeddings))
        await demo_sweep(cache, clock)
    finally:
        await repository.close()


def main() -> None:
    """Run all demos."""
    print("\n🚀 OptiLLM Cache Demo")
    print("=" * 70)

    try:
        asyncio.run(run())

        print("\n" + "=" * 70)
        print("✅ Demo completed successfully!")
        print("=" * 70)

    except OptiLLMError as e:
        print(f"\n❌ Error: {e}")
        print("\nMake sure Redis Stack is running:")
        print("  docker run -p 6379:6379 redis/redis-stack-server")
        print("\nOr set REDIS_URL to your Redis instance.")


if __name__ == "__main__":
    main()
