"""
Tests for the typeahead suggestion service.
"""

import pytest

from optillm.entities import RecordMetadata, SuggestQuery


async def seed(store, embeddings, prompt, tenant_id="acme", payload=None, ttl_seconds=None):
    await embeddings.probe()
    vector = await embeddings.encode(prompt)
    return await store.store(
        vector=vector,
        payload=payload or f"answer to {prompt}",
        metadata=RecordMetadata(provider="openai", model="gpt-4o-mini", tenant_id=tenant_id),
        prompt=prompt,
        ttl_seconds=ttl_seconds,
    )


@pytest.fixture
def capitals():
    return [
        "what is the capital of france",
        "what is the capital of spain",
        "what is the capital of germany",
        "how do i bake sourdough bread",
    ]


class TestSuggest:
    """Test cases for SuggestionService.suggest"""

    @pytest.mark.asyncio
    async def test_ranked_by_score(self, suggestion_service, store, embeddings, capitals):
        for prompt in capitals:
            await seed(store, embeddings, prompt)

        suggestions = await suggestion_service.suggest(SuggestQuery(text="what is the capital of france"))

        assert [s.prompt for s in suggestions][0] == "what is the capital of france"
        assert len(suggestions) == 3
        scores = [s.score for s in suggestions]
        assert scores == sorted(scores, reverse=True)
        assert all(score >= 0.7 for score in scores)

    @pytest.mark.asyncio
    async def test_respects_limit(self, suggestion_service, store, embeddings, capitals):
        for prompt in capitals:
            await seed(store, embeddings, prompt)

        suggestions = await suggestion_service.suggest(
            SuggestQuery(text="what is the capital of france", limit=2)
        )

        assert len(suggestions) == 2

    @pytest.mark.asyncio
    async def test_respects_min_similarity(self, suggestion_service, store, embeddings, capitals):
        for prompt in capitals:
            await seed(store, embeddings, prompt)

        suggestions = await suggestion_service.suggest(
            SuggestQuery(text="what is the capital of france", min_similarity=0.9)
        )

        assert len(suggestions) == 1
        assert suggestions[0].score == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_ignores_age(self, suggestion_service, store, embeddings, clock):
        await seed(store, embeddings, "an old cached question", ttl_seconds=60)
        clock.advance(1_000_000)

        suggestions = await suggestion_service.suggest(SuggestQuery(text="an old cached question"))

        assert len(suggestions) == 1

    @pytest.mark.asyncio
    async def test_tenant_scope(self, suggestion_service, store, embeddings):
        await seed(store, embeddings, "tenant scoped question", tenant_id="acme")
        await seed(store, embeddings, "tenant scoped question", tenant_id="globex")

        acme = await suggestion_service.suggest(SuggestQuery(text="tenant scoped question", tenant_id="acme"))
        everyone = await suggestion_service.suggest(SuggestQuery(text="tenant scoped question"))

        assert [s.metadata.tenant_id for s in acme] == ["acme"]
        assert len(everyone) == 2

    @pytest.mark.asyncio
    async def test_items_carry_prompt_payload_and_created_at(self, suggestion_service, store, embeddings, clock):
        record_id = await seed(store, embeddings, "what is redis", payload="An in-memory data store")

        [suggestion] = await suggestion_service.suggest(SuggestQuery(text="what is redis"))

        assert suggestion.id == record_id
        assert suggestion.prompt == "what is redis"
        assert suggestion.payload == "An in-memory data store"
        assert suggestion.created_at == clock()
        assert suggestion.metadata.provider == "openai"

    @pytest.mark.asyncio
    async def test_empty_store(self, suggestion_service):
        assert await suggestion_service.suggest(SuggestQuery(text="anything")) == []

    @pytest.mark.asyncio
    async def test_is_read_only(self, suggestion_service, store, embeddings):
        await seed(store, embeddings, "read only check")
        before = store.store_calls

        await suggestion_service.suggest(SuggestQuery(text="read only check"))

        assert store.store_calls == before

    def test_query_validation(self):
        with pytest.raises(ValueError):
            SuggestQuery(text="x", limit=0)
        with pytest.raises(ValueError):
            SuggestQuery(text="x", min_similarity=-0.1)

    def test_query_defaults(self):
        query = SuggestQuery(text="x")
        assert query.limit == 5
        assert query.min_similarity == 0.7
        assert query.tenant_id is None
