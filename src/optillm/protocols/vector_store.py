"""Vector store protocol.

Defines the interface the cache services need from an external
nearest-neighbour index. The index itself (storage, search algorithm,
concurrency guarantees) is owned by the backing service.
"""

from typing import Protocol, runtime_checkable

from optillm.entities import CacheMatch, RecordMetadata, ScopeFilter, SweepResult


@runtime_checkable
class VectorStore(Protocol):
    """Protocol for vector store backends."""

    async def ensure_collection(self, dimension: int) -> None:
        """Create the collection with cosine distance if it does not exist.

        Safe to call repeatedly. Also creates the filterable metadata fields.

        Args:
            dimension: Vector length for the lifetime of the collection
        """
        ...

    async def search(
        self,
        vector: list[float],
        limit: int,
        score_threshold: float,
        scope: ScopeFilter,
    ) -> list[CacheMatch]:
        """Find the records most similar to ``vector``.

        Args:
            vector: The query embedding vector
            limit: Maximum number of results to return
            score_threshold: Minimum cosine similarity of a result
            scope: Exact-match restrictions on record metadata

        Returns:
            Matches sorted by score, highest first
        """
        ...

    async def store(
        self,
        vector: list[float],
        payload: str,
        metadata: RecordMetadata,
        prompt: str,
        ttl_seconds: int | None = None,
    ) -> str:
        """Insert a new record.

        Args:
            vector: The embedding vector for the prompt
            payload: The serialized result to cache
            metadata: Scoping metadata
            prompt: The original request text
            ttl_seconds: Lifetime of the record; no expiry when None or 0

        Returns:
            The id of the new record
        """
        ...

    async def sweep_expired(self, now: float) -> SweepResult:
        """Delete every record whose expiry is at or before ``now``.

        Never raises: failures are reported in the result.
        """
        ...

    async def count(self) -> int:
        """Count the records in the collection."""
        ...

    async def health_check(self) -> bool:
        """Check if the backend is reachable."""
        ...

    async def get_stats(self) -> dict:
        """Get backend statistics (implementation-specific)."""
        ...
