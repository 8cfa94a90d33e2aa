"""
Pytest configuration and fixtures for the cache engine tests.
"""

import uuid

import numpy as np
import pytest
import pytest_asyncio

from optillm.config import EngineConfig
from optillm.entities import CacheMatch, CacheRecord, RecordMetadata, ScopeFilter, SweepResult
from optillm.repositories import LocalEmbeddingProvider
from optillm.services import CacheService, EmbeddingService, SuggestionService


class FakeClock:
    """Manually advanced clock returning Unix seconds."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class InMemoryVectorStore:
    """Brute-force cosine VectorStore used in place of Redis."""

    def __init__(self, clock: FakeClock) -> None:
        self._clock = clock
        self.records: dict[str, CacheRecord] = {}
        self.dimension: int | None = None
        self.ensure_calls = 0
        self.store_calls = 0
        self.search_calls = 0

    async def ensure_collection(self, dimension: int) -> None:
        self.ensure_calls += 1
        if self.dimension is None:
            self.dimension = dimension

    async def search(self, vector, limit, score_threshold, scope: ScopeFilter) -> list[CacheMatch]:
        self.search_calls += 1
        query = np.asarray(vector, dtype=float)
        query_norm = np.linalg.norm(query)
        conditions = scope.conditions()

        matches = []
        for record in self.records.values():
            stored = record.metadata.to_dict()
            if any(stored.get(field) != value for field, value in conditions.items()):
                continue
            candidate = np.asarray(record.vector, dtype=float)
            denominator = query_norm * np.linalg.norm(candidate)
            if denominator == 0:
                continue
            score = float(min(1.0, max(0.0, np.dot(query, candidate) / denominator)))
            if score >= score_threshold:
                matches.append(CacheMatch(record=record, score=score))

        matches.sort(key=lambda m: m.score, reverse=True)
        return matches[:limit]

    async def store(self, vector, payload, metadata, prompt, ttl_seconds=None) -> str:
        self.store_calls += 1
        record_id = uuid.uuid4().hex
        created_at = self._clock()
        self.records[record_id] = CacheRecord(
            id=record_id,
            payload=payload,
            metadata=metadata,
            prompt=prompt,
            created_at=created_at,
            expires_at=created_at + ttl_seconds if ttl_seconds else None,
            vector=list(vector),
        )
        return record_id

    async def sweep_expired(self, now: float) -> SweepResult:
        expired = [
            record_id
            for record_id, record in self.records.items()
            if record.expires_at is not None and record.expires_at <= now
        ]
        for record_id in expired:
            del self.records[record_id]
        return SweepResult(removed=len(expired))

    async def count(self) -> int:
        return len(self.records)

    async def health_check(self) -> bool:
        return True

    async def get_stats(self) -> dict:
        return {"total_entries": len(self.records), "dimension": self.dimension}


class CountingProducer:
    """Producer that records how often it was awaited."""

    def __init__(self, response: str = "Paris") -> None:
        self.response = response
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        return self.response


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock) -> InMemoryVectorStore:
    return InMemoryVectorStore(clock)


@pytest.fixture
def engine_config() -> EngineConfig:
    """The worked example configuration: threshold 0.85, TTL 60s."""
    return EngineConfig(
        collection_name="test_cache",
        default_ttl_seconds=60,
        default_similarity_threshold=0.85,
        embedding_provider="local",
    )


@pytest.fixture
def embeddings() -> EmbeddingService:
    return EmbeddingService(LocalEmbeddingProvider(dimension=64))


@pytest_asyncio.fixture
async def cache_service(store, embeddings, engine_config, clock) -> CacheService:
    service = CacheService(
        repository=store,
        embeddings=embeddings,
        config=engine_config,
        clock=clock,
    )
    await service.initialize()
    return service


@pytest.fixture
def suggestion_service(store, embeddings) -> SuggestionService:
    return SuggestionService(repository=store, embeddings=embeddings)


@pytest.fixture
def producer() -> CountingProducer:
    return CountingProducer()


@pytest.fixture
def metadata() -> RecordMetadata:
    return RecordMetadata(provider="openai", model="gpt-4o-mini", user_id="alice", tenant_id="acme")
