"""
Tests for the Redis vector store adapter.

The Redis client and the redisvl index are mocked; these tests cover the
translation between the VectorStore contract and Redis, not Redis itself.
"""

import json
import struct
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio
from redis.exceptions import ConnectionError as RedisConnectionError
from redisvl.query import FilterQuery, VectorQuery

from optillm.entities import RecordMetadata, ScopeFilter
from optillm.exceptions import DimensionMismatchError, StoreUnavailableError
from optillm.repositories import RedisVectorStore
from optillm.repositories.redis_repository import TAG_SEPARATOR, distance_to_score, indexed_dimension

NOW = 1_700_000_000.0
DIMENSION = 8


def ft_info(dimension):
    """FT.INFO reply as returned by a bytes-mode RESP2 client."""
    return {
        "attributes": [
            [b"identifier", b"tenant_id", b"attribute", b"tenant_id", b"type", b"TAG", b"SEPARATOR", b"\x1f"],
            [
                b"identifier", b"vector", b"attribute", b"vector", b"type", b"VECTOR",
                b"algorithm", b"HNSW", b"data_type", b"FLOAT32", b"dim", dimension,
                b"distance_metric", b"COSINE",
            ],
        ]
    }


@pytest.fixture
def redis_client():
    client = MagicMock()
    client.hset = AsyncMock(return_value=1)
    client.delete = AsyncMock(return_value=0)
    client.ping = AsyncMock(return_value=True)
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def index():
    index = MagicMock()
    index.exists = AsyncMock(return_value=False)
    index.create = AsyncMock()
    index.query = AsyncMock(return_value=[])
    index.info = AsyncMock(return_value=ft_info(DIMENSION))
    return index


@pytest.fixture
def index_cls(index):
    with patch("optillm.repositories.redis_repository.AsyncSearchIndex") as index_cls:
        index_cls.from_dict.return_value = index
        yield index_cls


@pytest_asyncio.fixture
async def repository(redis_client, index_cls):
    repository = RedisVectorStore(
        redis_client=redis_client,
        collection_name="test_cache",
        sweep_batch_size=2,
        clock=lambda: NOW,
    )
    await repository.ensure_collection(DIMENSION)
    return repository


def search_result(record_id, distance, prompt="What is the capital of France?", tenant_id="acme", **extra):
    metadata = {
        "provider": "openai",
        "model": "gpt-4o-mini",
        "user_id": None,
        "tenant_id": tenant_id,
        "original_prompt": prompt,
    }
    result = {
        "id": f"test_cache:{record_id}",
        "record_id": record_id,
        "vector_distance": str(distance),
        "prompt": prompt,
        "payload": "Paris",
        "metadata": json.dumps(metadata),
        "created_at": str(NOW - 5),
    }
    result.update(extra)
    return result


class TestDistanceToScore:
    """Test cases for cosine distance conversion"""

    @pytest.mark.parametrize(
        "distance,expected",
        [("0", 1.0), ("0.25", 0.75), ("1", 0.0), ("2", 0.0), ("-0.0000001", 1.0), (0.1, 0.9)],
    )
    def test_conversion(self, distance, expected):
        assert distance_to_score(distance) == pytest.approx(expected)

    @pytest.mark.parametrize("distance", [None, "nan", float("nan")])
    def test_undefined(self, distance):
        assert distance_to_score(distance) is None


class TestEnsureCollection:
    """Test cases for index creation"""

    @pytest.mark.asyncio
    async def test_creates_missing_index(self, repository, index, index_cls):
        index.create.assert_awaited_once_with(overwrite=False)

        schema = index_cls.from_dict.call_args.args[0]
        assert schema["index"]["name"] == "test_cache"
        assert schema["index"]["prefix"] == "test_cache:"
        fields = {field["name"]: field for field in schema["fields"]}
        for name in ("tenant_id", "user_id", "provider", "model"):
            assert fields[name]["type"] == "tag"
            assert fields[name]["attrs"]["case_sensitive"] is True
            assert fields[name]["attrs"]["separator"] == TAG_SEPARATOR
        assert fields["created_at"]["type"] == "numeric"
        assert fields["expires_at"]["type"] == "numeric"
        assert fields["vector"]["attrs"]["dims"] == DIMENSION
        assert fields["vector"]["attrs"]["distance_metric"] == "cosine"

    @pytest.mark.asyncio
    async def test_idempotent(self, repository, index, index_cls):
        await repository.ensure_collection(DIMENSION)

        assert index_cls.from_dict.call_count == 1
        index.create.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_existing_index_is_reused(self, redis_client, index, index_cls):
        index.exists.return_value = True
        repository = RedisVectorStore(redis_client=redis_client, collection_name="test_cache")

        await repository.ensure_collection(DIMENSION)

        index.create.assert_not_awaited()
        index.info.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_existing_index_with_other_dimension(self, redis_client, index, index_cls):
        index.exists.return_value = True
        index.info.return_value = ft_info(384)
        repository = RedisVectorStore(redis_client=redis_client, collection_name="test_cache")

        with pytest.raises(DimensionMismatchError) as excinfo:
            await repository.ensure_collection(1536)

        assert excinfo.value.expected == 384
        assert excinfo.value.actual == 1536
        index.create.assert_not_awaited()
        with pytest.raises(RuntimeError):
            await repository.search([0.1] * 1536, 1, 0.85, ScopeFilter())

    @pytest.mark.asyncio
    async def test_unreachable_redis(self, redis_client, index, index_cls):
        index.exists.side_effect = RedisConnectionError("connection refused")
        repository = RedisVectorStore(redis_client=redis_client)

        with pytest.raises(StoreUnavailableError):
            await repository.ensure_collection(DIMENSION)


class TestIndexedDimension:
    """Test cases for reading the vector DIM from FT.INFO"""

    def test_flat_bytes_attributes(self):
        assert indexed_dimension(ft_info(384)) == 384

    def test_mapping_attributes(self):
        info = {
            "attributes": [
                {"identifier": "vector", "attribute": "vector", "type": "VECTOR", "dim": "1536"},
            ]
        }
        assert indexed_dimension(info) == 1536

    def test_missing_vector_field(self):
        assert indexed_dimension({"attributes": [["identifier", "tenant_id", "type", "TAG"]]}) is None
        assert indexed_dimension({}) is None


class TestScopeExpression:
    """Test cases for scope to filter translation"""

    def test_empty_scope(self):
        assert RedisVectorStore.scope_expression(ScopeFilter()) is None

    def test_tenant_scope(self):
        expression = RedisVectorStore.scope_expression(ScopeFilter.for_tenant("acme"))
        assert str(expression) == "@tenant_id:{acme}"

    def test_tenant_case_is_preserved(self):
        expression = RedisVectorStore.scope_expression(ScopeFilter.for_tenant("ACME"))
        assert str(expression) == "@tenant_id:{ACME}"

    def test_combined_scope(self):
        expression = RedisVectorStore.scope_expression(ScopeFilter(tenant_id="acme", user_id="alice"))
        rendered = str(expression)
        assert "@tenant_id:{acme}" in rendered
        assert "@user_id:{alice}" in rendered


class TestSearch:
    """Test cases for vector search"""

    @pytest.mark.asyncio
    async def test_converts_and_filters_results(self, repository, index):
        index.query.return_value = [
            search_result("far", 0.5),
            search_result("near", 0.05, expires_at=str(NOW + 55)),
        ]

        matches = await repository.search([0.1] * DIMENSION, 5, 0.85, ScopeFilter.for_tenant("acme"))

        assert [m.record.id for m in matches] == ["near"]
        match = matches[0]
        assert match.score == pytest.approx(0.95)
        assert match.record.payload == "Paris"
        assert match.record.prompt == "What is the capital of France?"
        assert match.record.metadata.tenant_id == "acme"
        assert match.record.created_at == NOW - 5
        assert match.record.expires_at == NOW + 55

        query = index.query.await_args.args[0]
        assert isinstance(query, VectorQuery)

    @pytest.mark.asyncio
    async def test_sorted_and_limited(self, repository, index):
        index.query.return_value = [
            search_result("b", 0.1),
            search_result("a", 0.0),
            search_result("c", 0.2),
        ]

        matches = await repository.search([0.1] * DIMENSION, 2, 0.0, ScopeFilter())

        assert [m.record.id for m in matches] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_record_without_expiry(self, repository, index):
        index.query.return_value = [search_result("forever", 0.0)]

        [match] = await repository.search([0.1] * DIMENSION, 1, 0.5, ScopeFilter())

        assert match.record.expires_at is None

    @pytest.mark.asyncio
    async def test_skips_undefined_distance(self, repository, index):
        index.query.return_value = [search_result("zero", "nan")]

        assert await repository.search([0.0] * DIMENSION, 1, 0.0, ScopeFilter()) == []

    @pytest.mark.asyncio
    async def test_failure_raises_store_unavailable(self, repository, index):
        index.query.side_effect = RedisConnectionError("connection reset")

        with pytest.raises(StoreUnavailableError):
            await repository.search([0.1] * DIMENSION, 1, 0.85, ScopeFilter())

    @pytest.mark.asyncio
    async def test_requires_collection(self, redis_client):
        repository = RedisVectorStore(redis_client=redis_client)

        with pytest.raises(RuntimeError):
            await repository.search([0.1] * DIMENSION, 1, 0.85, ScopeFilter())


class TestStore:
    """Test cases for writing records"""

    @pytest.mark.asyncio
    async def test_writes_hash_with_expiry(self, repository, redis_client):
        metadata = RecordMetadata(provider="openai", model="gpt-4o-mini", tenant_id="acme")

        record_id = await repository.store([0.5] * DIMENSION, "Paris", metadata, "capital?", ttl_seconds=60)

        key = redis_client.hset.await_args.args[0]
        mapping = redis_client.hset.await_args.kwargs["mapping"]
        assert key == f"test_cache:{record_id}"
        assert mapping["record_id"] == record_id
        assert mapping["payload"] == "Paris"
        assert mapping["tenant_id"] == "acme"
        assert mapping["provider"] == "openai"
        assert "user_id" not in mapping
        assert float(mapping["created_at"]) == NOW
        assert float(mapping["expires_at"]) == NOW + 60
        assert list(struct.unpack(f"{DIMENSION}f", mapping["vector"])) == pytest.approx([0.5] * DIMENSION)
        assert json.loads(mapping["metadata"])["original_prompt"] == "capital?"

    @pytest.mark.asyncio
    async def test_no_expiry_without_ttl(self, repository, redis_client):
        metadata = RecordMetadata(provider="openai", model="gpt-4o-mini")

        await repository.store([0.5] * DIMENSION, "Paris", metadata, "capital?")

        mapping = redis_client.hset.await_args.kwargs["mapping"]
        assert "expires_at" not in mapping
        assert "tenant_id" not in mapping

    @pytest.mark.asyncio
    async def test_unique_ids(self, repository):
        metadata = RecordMetadata(provider="openai", model="gpt-4o-mini")

        ids = {await repository.store([0.5] * DIMENSION, "x", metadata, "p") for _ in range(5)}

        assert len(ids) == 5

    @pytest.mark.asyncio
    async def test_rejects_wrong_dimension(self, repository):
        metadata = RecordMetadata(provider="openai", model="gpt-4o-mini")

        with pytest.raises(DimensionMismatchError):
            await repository.store([0.5] * (DIMENSION + 1), "Paris", metadata, "capital?")

    @pytest.mark.asyncio
    async def test_failure_raises_store_unavailable(self, repository, redis_client):
        redis_client.hset.side_effect = RedisConnectionError("connection refused")
        metadata = RecordMetadata(provider="openai", model="gpt-4o-mini")

        with pytest.raises(StoreUnavailableError):
            await repository.store([0.5] * DIMENSION, "Paris", metadata, "capital?")


    @pytest.mark.asyncio
    async def test_rejects_separator_in_scope_value(self, repository, redis_client):
        metadata = RecordMetadata(provider="openai", model="gpt-4o-mini", tenant_id=f"a{TAG_SEPARATOR}b")

        with pytest.raises(ValueError):
            await repository.store([0.5] * DIMENSION, "Paris", metadata, "capital?")
        redis_client.hset.assert_not_awaited()


class TestSweepExpired:
    """Test cases for the expiry sweep"""

    @pytest.mark.asyncio
    async def test_deletes_in_batches(self, repository, index, redis_client):
        index.query.side_effect = [
            [{"id": "test_cache:a"}, {"id": "test_cache:b"}],
            [{"id": "test_cache:c"}],
        ]
        redis_client.delete.side_effect = [2, 1]

        result = await repository.sweep_expired(NOW)

        assert result.ok
        assert result.removed == 3
        assert redis_client.delete.await_args_list[0].args == ("test_cache:a", "test_cache:b")
        assert isinstance(index.query.await_args.args[0], FilterQuery)

    @pytest.mark.asyncio
    async def test_nothing_expired(self, repository, index, redis_client):
        result = await repository.sweep_expired(NOW)

        assert result.ok
        assert result.removed == 0
        redis_client.delete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_failure_is_reported(self, repository, index, redis_client):
        index.query.side_effect = [
            [{"id": "test_cache:a"}, {"id": "test_cache:b"}],
            RedisConnectionError("connection reset"),
        ]
        redis_client.delete.return_value = 2

        result = await repository.sweep_expired(NOW)

        assert not result.ok
        assert result.removed == 2
        assert "connection reset" in result.error

    @pytest.mark.asyncio
    async def test_malformed_row_is_reported(self, repository, index, redis_client):
        index.query.side_effect = [[{"record_id": "a"}]]

        result = await repository.sweep_expired(NOW)

        assert not result.ok
        assert result.removed == 0
        assert "KeyError" in result.error

    @pytest.mark.asyncio
    async def test_uninitialized_collection_is_reported(self, redis_client):
        repository = RedisVectorStore(redis_client=redis_client)

        result = await repository.sweep_expired(NOW)

        assert not result.ok


class TestHousekeeping:
    """Test cases for count, health and stats"""

    @pytest.mark.asyncio
    async def test_count(self, repository, redis_client):
        async def keys(match):
            for key in (b"test_cache:a", b"test_cache:b", b"test_cache:c"):
                yield key

        redis_client.scan_iter = keys

        assert await repository.count() == 3
        stats = await repository.get_stats()
        assert stats["total_entries"] == 3
        assert stats["collection_name"] == "test_cache"
        assert stats["dimension"] == DIMENSION

    @pytest.mark.asyncio
    async def test_health_check(self, repository, redis_client):
        assert await repository.health_check() is True

        redis_client.ping.side_effect = RedisConnectionError("down")
        assert await repository.health_check() is False

    @pytest.mark.asyncio
    async def test_close(self, repository, redis_client):
        await repository.close()
        redis_client.aclose.assert_awaited_once()
