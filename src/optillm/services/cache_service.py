"""Cache service for core business logic.

This service orchestrates cache operations by coordinating
the vector store (data access) and embedding service (vector generation),
and decides for each request whether a stored result can be reused.
"""

import time
from typing import Awaitable, Callable

from optillm.config import EngineConfig
from optillm.entities import CaptureRequest, CaptureResult, ScopeFilter, SweepResult
from optillm.protocols import EmbeddingProvider, VectorStore
from optillm.utils import get_logger

from .embedding_service import EmbeddingService

logger = get_logger(__name__)

Producer = Callable[[], Awaitable[str]]


class CacheService:
    """Core cache orchestration service.

    This service depends on PROTOCOLS, not concrete implementations:
    - VectorStore: Redis Stack by default
    - EmbeddingProvider (through EmbeddingService): hashing, OpenAI, Ollama

    No state is kept across calls besides the immutable configuration.
    Concurrent misses for the same prompt may both invoke the producer and
    both write a record.

    Example:
        ```python
        cache = CacheService.create(
            repository=RedisVectorStore.create(settings),
            embedding_provider=LocalEmbeddingProvider.create(),
            config=settings.engine_config(),
        )
        await cache.initialize()

        result = await cache.capture(request, lambda: llm.complete(request.prompt))
        ```
    """

    def __init__(
        self,
        repository: VectorStore,
        embeddings: EmbeddingService,
        config: EngineConfig,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the cache service.

        Args:
            repository: Vector store backend (required).
            embeddings: Embedding service (required).
            config: Immutable engine configuration (required).
            clock: Source of the current Unix time.
        """
        self._repository = repository
        self._embeddings = embeddings
        self._config = config
        self._clock = clock

    @classmethod
    def create(
        cls,
        repository: VectorStore,
        embedding_provider: EmbeddingProvider,
        config: EngineConfig,
        clock: Callable[[], float] = time.time,
    ) -> "CacheService":
        """Factory method wrapping a raw provider in an EmbeddingService.

        Args:
            repository: Vector store backend.
            embedding_provider: Any EmbeddingProvider implementation.
            config: Engine configuration.
            clock: Source of the current Unix time.

        Returns:
            Configured CacheService instance (not yet initialized)
        """
        return cls(
            repository=repository,
            embeddings=EmbeddingService(embedding_provider),
            config=config,
            clock=clock,
        )

    async def initialize(self) -> int:
        """Probe the embedding dimension and ensure the collection exists.

        Returns:
            The embedding dimension
        """
        dimension = await self._embeddings.probe()
        await self._repository.ensure_collection(dimension)
        return dimension

    def _resolve_threshold(self, request: CaptureRequest) -> float:
        if request.policy is not None and request.policy.min_similarity is not None:
            return request.policy.min_similarity
        return self._config.default_similarity_threshold

    def _resolve_max_age(self, request: CaptureRequest) -> int:
        if request.policy is not None and request.policy.max_age is not None:
            return request.policy.max_age
        return self._config.default_ttl_seconds

    async def capture(self, request: CaptureRequest, producer: Producer) -> CaptureResult:
        """Return a cached result for the request, or produce and cache one.

        Business logic:
        1. Embed the prompt
        2. Search the closest record in the request's tenant
        3. Reuse it if similar enough AND fresh enough
        4. Otherwise call the producer and store its result

        A similar but stale record is left in place; the expiry sweep removes
        it. Errors from embedding, search, store and the producer propagate
        unchanged, and nothing is written when the producer fails.

        Args:
            request: Prompt, scoping metadata and optional policy overrides
            producer: Zero-argument coroutine function for the expensive call

        Returns:
            CaptureResult with the payload and whether it was cached
        """
        vector = await self._embeddings.encode(request.prompt)
        scope = ScopeFilter.for_tenant(request.metadata.tenant_id)
        threshold = self._resolve_threshold(request)
        max_age = self._resolve_max_age(request)

        matches = await self._repository.search(
            vector=vector,
            limit=1,
            score_threshold=threshold,
            scope=scope,
        )

        if matches:
            match = matches[0]
            age = match.record.age(self._clock())
            # max_age of 0 disables freshness gating
            if not max_age or age < max_age:
                logger.info(
                    "cache_hit",
                    record_id=match.record.id,
                    score=round(match.score, 3),
                    age_seconds=round(age, 1),
                    tenant_id=request.metadata.tenant_id,
                )
                return CaptureResult(
                    payload=match.record.payload,
                    cached=True,
                    cost_saved=True,
                    score=match.score,
                    record_id=match.record.id,
                )

            logger.info(
                "cache_stale",
                record_id=match.record.id,
                score=round(match.score, 3),
                age_seconds=round(age, 1),
                max_age=max_age,
            )
        else:
            logger.info("cache_miss", tenant_id=request.metadata.tenant_id, threshold=threshold)

        payload = await producer()

        record_id = await self._repository.store(
            vector=vector,
            payload=payload,
            metadata=request.metadata,
            prompt=request.prompt,
            ttl_seconds=max_age or None,
        )

        return CaptureResult(
            payload=payload,
            cached=False,
            cost_saved=False,
            record_id=record_id,
        )

    async def sweep_expired(self, now: float | None = None) -> SweepResult:
        """Remove expired records.

        Never raises: a failed sweep is logged and reported in the result.

        Args:
            now: Cut-off Unix time; defaults to the service clock

        Returns:
            SweepResult with the number of removed records or the error
        """
        cutoff = self._clock() if now is None else now
        result = await self._repository.sweep_expired(cutoff)

        if result.ok:
            logger.info("sweep_completed", removed=result.removed)
        else:
            logger.warning("sweep_failed", removed=result.removed, error=result.error)
        return result

    async def get_stats(self) -> dict:
        """Get cache statistics.

        Returns:
            Dictionary with cache statistics
        """
        stats = await self._repository.get_stats()
        stats["collection_name"] = self._config.collection_name
        stats["embedding_provider"] = self._config.embedding_provider
        stats["embedding_model"] = self._embeddings.model_name
        stats["embedding_dimension"] = self._embeddings.dimension
        stats["similarity_threshold"] = self._config.default_similarity_threshold
        stats["ttl_seconds"] = self._config.default_ttl_seconds
        return stats

    async def is_healthy(self) -> bool:
        """Check if both the vector store and the embedding provider are healthy."""
        repo_healthy = await self._repository.health_check()
        embeddings_healthy = await self._embeddings.is_available()
        return repo_healthy and embeddings_healthy

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def repository(self) -> VectorStore:
        """Get the underlying repository (for testing)."""
        return self._repository

    @property
    def embeddings(self) -> EmbeddingService:
        """Get the underlying embedding service (for testing)."""
        return self._embeddings
