"""Suggestion service for typeahead lookups.

A read-only relative of the cache service: same embedding and scoped
search, looser defaults and no freshness gating.
"""

from optillm.entities import ScopeFilter, Suggestion, SuggestQuery
from optillm.protocols import VectorStore
from optillm.utils import get_logger

from .embedding_service import EmbeddingService

logger = get_logger(__name__)


class SuggestionService:
    """Ranks cached prompts similar to a partial query."""

    def __init__(self, repository: VectorStore, embeddings: EmbeddingService) -> None:
        self._repository = repository
        self._embeddings = embeddings

    async def suggest(self, query: SuggestQuery) -> list[Suggestion]:
        """Return cached records similar to ``query.text``.

        Records of any age are returned; only the similarity band and the
        optional tenant scope restrict the results.

        Args:
            query: The typeahead query

        Returns:
            Up to ``query.limit`` suggestions, highest score first
        """
        vector = await self._embeddings.encode(query.text)

        matches = await self._repository.search(
            vector=vector,
            limit=query.limit,
            score_threshold=query.min_similarity,
            scope=ScopeFilter.for_tenant(query.tenant_id),
        )

        suggestions = [
            Suggestion(
                id=match.record.id,
                prompt=match.record.prompt or None,
                payload=match.record.payload or None,
                score=match.score,
                created_at=match.record.created_at,
                metadata=match.record.metadata,
            )
            for match in matches
        ]
        suggestions.sort(key=lambda s: s.score, reverse=True)

        logger.debug("suggestions_ranked", count=len(suggestions), tenant_id=query.tenant_id)
        return suggestions[: query.limit]
