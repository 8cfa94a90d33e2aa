"""Redis implementation of VectorStore.

This repository uses Redis Stack with vector search capabilities (HNSW index)
through redisvl. It's the default implementation and satisfies the
VectorStore protocol.

Records are stored as hashes under ``<collection>:<record id>``. Keys never
carry a native Redis TTL: expiry is tracked in the ``expires_at`` field and
enforced by :meth:`RedisVectorStore.sweep_expired`.
"""

import json
import math
import struct
import time
import uuid
from typing import Any, Callable

from redis import asyncio as aioredis
from redis.exceptions import RedisError
from redisvl.exceptions import RedisSearchError
from redisvl.index import AsyncSearchIndex
from redisvl.query import FilterQuery, VectorQuery
from redisvl.query.filter import FilterExpression, Num, Tag

from optillm.config import Settings, get_redis_client
from optillm.entities import CacheMatch, CacheRecord, RecordMetadata, ScopeFilter, SweepResult
from optillm.exceptions import DimensionMismatchError, StoreUnavailableError
from optillm.utils import get_logger

logger = get_logger(__name__)

VECTOR_FIELD = "vector"
SCOPE_FIELDS = ("tenant_id", "user_id", "provider", "model")
# Scope tags match whole values, case included
TAG_SEPARATOR = "\x1f"
SCOPE_TAG_ATTRS = {"case_sensitive": True, "separator": TAG_SEPARATOR}
RETURN_FIELDS = ["record_id", "prompt", "payload", "metadata", "created_at", "expires_at"]

_STORE_ERRORS = (RedisError, RedisSearchError, OSError)


def distance_to_score(distance: Any) -> float | None:
    """Convert a Redis cosine distance (0-2) to a similarity in [0, 1].

    Returns None when the distance is missing or undefined (zero vectors).
    """
    if distance is None:
        return None
    value = float(distance)
    if math.isnan(value):
        return None
    return min(1.0, max(0.0, 1.0 - value))


def _as_str(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def indexed_dimension(info: dict[str, Any], field_name: str = VECTOR_FIELD) -> int | None:
    """Read the DIM of a vector field from FT.INFO output.

    Attributes come back as flat ``[key, value, ...]`` lists (RESP2) or as
    mappings (RESP3), with bytes or str keys depending on the client.
    """
    for attribute in info.get("attributes") or info.get(b"attributes") or []:
        if isinstance(attribute, dict):
            pairs = attribute.items()
        else:
            pairs = zip(attribute[::2], attribute[1::2])
        fields = {_as_str(key).lower(): value for key, value in pairs}
        if _as_str(fields.get("attribute", fields.get("identifier", ""))) != field_name:
            continue
        if "dim" in fields:
            return int(_as_str(fields["dim"]))
    return None


class RedisVectorStore:
    """Redis implementation using an HNSW vector index.

    This class satisfies the VectorStore protocol through structural
    typing - no explicit inheritance needed.

    Uses Redis Stack's vector search with:
    - HNSW (Hierarchical Navigable Small World) algorithm
    - COSINE distance metric
    - Tag fields for tenant/user/provider/model scoping
    - Numeric created_at/expires_at fields for freshness and sweeping
    """

    def __init__(
        self,
        redis_client: aioredis.Redis,
        collection_name: str = "llm_cache",
        sweep_batch_size: int = 500,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the Redis vector store.

        Args:
            redis_client: asyncio Redis client instance.
            collection_name: Name of the Redis search index and key prefix.
            sweep_batch_size: Number of expired keys deleted per round trip.
            clock: Source of the current Unix time.
        """
        self._client = redis_client
        self._collection_name = collection_name
        self._prefix = f"{collection_name}:"
        self._sweep_batch_size = sweep_batch_size
        self._clock = clock
        self._index: AsyncSearchIndex | None = None
        self._dimension: int | None = None

    @classmethod
    def create(cls, settings: Settings) -> "RedisVectorStore":
        """Factory method to create RedisVectorStore from settings.

        Args:
            settings: Application settings (Redis URL, credential, collection).

        Returns:
            Configured RedisVectorStore
        """
        return cls(
            redis_client=get_redis_client(settings),
            collection_name=settings.cache_collection_name,
        )

    def _schema(self, dimension: int) -> dict[str, Any]:
        return {
            "index": {
                "name": self._collection_name,
                "prefix": self._prefix,
                "storage_type": "hash",
            },
            "fields": [
                {"name": "record_id", "type": "tag"},
                {"name": "prompt", "type": "text"},
                *({"name": name, "type": "tag", "attrs": dict(SCOPE_TAG_ATTRS)} for name in SCOPE_FIELDS),
                {"name": "created_at", "type": "numeric"},
                {"name": "expires_at", "type": "numeric"},
                {
                    "name": VECTOR_FIELD,
                    "type": "vector",
                    "attrs": {
                        "dims": dimension,
                        "algorithm": "hnsw",
                        "distance_metric": "cosine",
                        "datatype": "float32",
                    },
                },
            ],
        }

    def _require_index(self) -> AsyncSearchIndex:
        if self._index is None:
            raise RuntimeError("Collection not initialized. Call ensure_collection() first.")
        return self._index

    async def ensure_collection(self, dimension: int) -> None:
        """Ensure the Redis vector index exists.

        Raises:
            DimensionMismatchError: If the index already exists with another
                vector dimension
            StoreUnavailableError: If Redis cannot be reached
        """
        if self._index is not None and self._dimension == dimension:
            return

        index = AsyncSearchIndex.from_dict(self._schema(dimension), redis_client=self._client)
        try:
            if await index.exists():
                existing = indexed_dimension(await index.info())
                if existing is not None and existing != dimension:
                    raise DimensionMismatchError(existing, dimension)
                logger.info("collection_exists", collection=self._collection_name, dimension=existing)
            else:
                await index.create(overwrite=False)
                logger.info(
                    "collection_created",
                    collection=self._collection_name,
                    dimension=dimension,
                )
        except _STORE_ERRORS as e:
            raise StoreUnavailableError(f"Failed to ensure collection {self._collection_name}: {e}") from e

        self._index = index
        self._dimension = dimension

    @staticmethod
    def scope_expression(scope: ScopeFilter) -> FilterExpression | None:
        """Translate a scope into a conjunction of tag equalities."""
        expression: FilterExpression | None = None
        for field, value in scope.conditions().items():
            condition = Tag(field) == value
            expression = condition if expression is None else expression & condition
        return expression

    async def search(
        self,
        vector: list[float],
        limit: int,
        score_threshold: float,
        scope: ScopeFilter,
    ) -> list[CacheMatch]:
        """Find similar records by vector similarity.

        Args:
            vector: The query embedding vector
            limit: Maximum number of results to return
            score_threshold: Minimum cosine similarity for matches
            scope: Exact-match restrictions on record metadata

        Returns:
            Matches sorted by score, highest first
        """
        index = self._require_index()

        query = VectorQuery(
            vector=vector,
            vector_field_name=VECTOR_FIELD,
            return_fields=RETURN_FIELDS,
            num_results=limit,
            filter_expression=self.scope_expression(scope),
        )

        try:
            results = await index.query(query)
        except _STORE_ERRORS as e:
            raise StoreUnavailableError(f"Vector search failed: {e}") from e

        matches = []
        for result in results:
            score = distance_to_score(result.get("vector_distance"))
            if score is None or score < score_threshold:
                continue
            matches.append(CacheMatch(record=self._to_record(result), score=score))

        # KNN results are ordered by distance already; keep it explicit
        matches.sort(key=lambda m: m.score, reverse=True)
        return matches[:limit]

    def _to_record(self, result: dict[str, Any]) -> CacheRecord:
        stored: dict[str, Any] = {}
        if result.get("metadata"):
            try:
                stored = json.loads(_as_str(result["metadata"]))
            except json.JSONDecodeError:
                stored = {}

        record_id = result.get("record_id")
        if not record_id:
            record_id = _as_str(result.get("id", "")).removeprefix(self._prefix)

        expires_at = result.get("expires_at")

        return CacheRecord(
            id=_as_str(record_id),
            payload=_as_str(result.get("payload", "")),
            metadata=RecordMetadata.from_dict(stored),
            prompt=stored.get("original_prompt") or _as_str(result.get("prompt", "")),
            created_at=float(result.get("created_at", 0)),
            expires_at=float(expires_at) if expires_at else None,
        )

    async def store(
        self,
        vector: list[float],
        payload: str,
        metadata: RecordMetadata,
        prompt: str,
        ttl_seconds: int | None = None,
    ) -> str:
        """Store a new record in Redis.

        Args:
            vector: The embedding vector for the prompt
            payload: The serialized result
            metadata: Scoping metadata
            prompt: The original request text
            ttl_seconds: Lifetime in seconds; no expiry when None or 0

        Returns:
            The id of the new record
        """
        self._require_index()
        if self._dimension is not None and len(vector) != self._dimension:
            raise DimensionMismatchError(self._dimension, len(vector))

        record_id = uuid.uuid4().hex
        created_at = self._clock()

        mapping: dict[str, Any] = {
            "record_id": record_id,
            "prompt": prompt,
            "payload": payload,
            # float32 bytes, matching the index datatype
            VECTOR_FIELD: struct.pack(f"{len(vector)}f", *vector),
            "created_at": str(created_at),
            "metadata": json.dumps({**metadata.to_dict(), "original_prompt": prompt}),
        }
        for field, value in metadata.to_dict().items():
            if not value:
                continue
            if TAG_SEPARATOR in value:
                raise ValueError(f"{field} must not contain the tag separator")
            mapping[field] = value
        if ttl_seconds:
            mapping["expires_at"] = str(created_at + ttl_seconds)

        try:
            await self._client.hset(f"{self._prefix}{record_id}", mapping=mapping)
        except _STORE_ERRORS as e:
            raise StoreUnavailableError(f"Failed to store record: {e}") from e

        return record_id

    async def sweep_expired(self, now: float) -> SweepResult:
        """Delete all records with ``expires_at <= now``.

        Pages through the expired set in batches. Failures stop the sweep and
        are reported in the result together with the count removed so far.
        """
        if self._index is None:
            return SweepResult(error="Collection not initialized")

        query = FilterQuery(
            filter_expression=Num("expires_at") <= now,
            return_fields=["record_id"],
            num_results=self._sweep_batch_size,
        )

        removed = 0
        try:
            while True:
                results = await self._index.query(query)
                if not results:
                    break
                keys = [_as_str(result["id"]) for result in results]
                deleted = await self._client.delete(*keys)
                removed += deleted
                if deleted == 0 or len(results) < self._sweep_batch_size:
                    break
        except (KeyError, *_STORE_ERRORS) as e:
            return SweepResult(removed=removed, error=f"{type(e).__name__}: {e}")

        return SweepResult(removed=removed)

    async def count(self) -> int:
        """Count total records in the collection."""
        count = 0
        try:
            async for _ in self._client.scan_iter(match=f"{self._prefix}*"):
                count += 1
        except _STORE_ERRORS as e:
            raise StoreUnavailableError(f"Failed to count records: {e}") from e
        return count

    async def health_check(self) -> bool:
        """Check if Redis is accessible."""
        try:
            return bool(await self._client.ping())
        except _STORE_ERRORS:
            return False

    async def get_stats(self) -> dict:
        """Get repository statistics."""
        return {
            "collection_name": self._collection_name,
            "total_entries": await self.count(),
            "dimension": self._dimension,
        }

    async def close(self) -> None:
        """Close the Redis connection pool."""
        await self._client.aclose()

    @property
    def client(self) -> aioredis.Redis:
        """Get the Redis client."""
        return self._client
