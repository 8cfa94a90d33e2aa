"""HTTP handlers for cache operations.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like status codes, validation, and error handling.
"""

import time
from datetime import datetime, timezone

from fastapi import HTTPException, status

from optillm.dto import (
    CacheStatsResponse,
    ChatMetadata,
    ChatRequest,
    ChatResponse,
    CleanupResponse,
    HealthCheckResponse,
    SuggestionItem,
    SuggestRequest,
    SuggestResponse,
)
from optillm.entities import CachePolicy, CaptureRequest, RecordMetadata, SuggestQuery
from optillm.exceptions import EmbeddingError, OptiLLMError, ProducerError, StoreUnavailableError
from optillm.repositories import CompletionProvider
from optillm.services import CacheService, SuggestionService


def _http_error(error: OptiLLMError, action: str) -> HTTPException:
    """Map a domain error to an HTTP error response."""
    if isinstance(error, (ProducerError, EmbeddingError)):
        code = status.HTTP_502_BAD_GATEWAY
    elif isinstance(error, StoreUnavailableError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail=f"Failed to {action}: {error}")


class CacheHandler:
    """HTTP handlers for cache operations.

    This handler delegates business logic to CacheService and
    SuggestionService and handles HTTP-specific concerns like:
    - Converting DTOs to entities and back
    - Setting appropriate status codes
    - Error handling and responses
    """

    def __init__(
        self,
        cache_service: CacheService,
        suggestion_service: SuggestionService,
        completion_provider: CompletionProvider,
    ) -> None:
        """Initialize the cache handler.

        Args:
            cache_service: The cache decision engine (required).
            suggestion_service: The typeahead service (required).
            completion_provider: Producer for cache misses (required).
        """
        self._cache = cache_service
        self._suggestions = suggestion_service
        self._completion = completion_provider

    async def chat(self, request: ChatRequest) -> ChatResponse:
        """Handle POST /chat requests.

        Args:
            request: The chat request DTO

        Returns:
            ChatResponse with the cached or generated response

        Raises:
            HTTPException: If embedding, the vector store or the producer fails
        """
        start_time = time.time()

        metadata = RecordMetadata(
            provider=self._completion.provider,
            model=self._completion.model_name,
            user_id=request.user_id,
            tenant_id=request.tenant_id,
        )
        policy = None
        if request.policy is not None:
            policy = CachePolicy(
                max_age=request.policy.max_age,
                min_similarity=request.policy.min_similarity,
            )

        try:
            result = await self._cache.capture(
                CaptureRequest(prompt=request.prompt, metadata=metadata, policy=policy),
                lambda: self._completion.complete(request.prompt),
            )
        except OptiLLMError as e:
            raise _http_error(e, "answer chat request") from e

        return ChatResponse(
            response=result.payload,
            cached=result.cached,
            cost_saved=result.cost_saved,
            duration_ms=(time.time() - start_time) * 1000,
            metadata=ChatMetadata(
                user_id=request.user_id,
                tenant_id=request.tenant_id,
                timestamp=datetime.now(timezone.utc).isoformat(),
            ),
        )

    async def suggest(self, request: SuggestRequest) -> SuggestResponse:
        """Handle POST /suggest requests.

        Args:
            request: The suggest request DTO

        Returns:
            SuggestResponse with ranked suggestions
        """
        start_time = time.time()

        try:
            suggestions = await self._suggestions.suggest(
                SuggestQuery(
                    text=request.text,
                    tenant_id=request.tenant_id,
                    limit=request.limit,
                    min_similarity=request.min_similarity,
                )
            )
        except OptiLLMError as e:
            raise _http_error(e, "suggest") from e

        items = [
            SuggestionItem(
                id=suggestion.id,
                prompt=suggestion.prompt,
                response=suggestion.payload,
                score=suggestion.score,
                created_at=suggestion.created_at,
                metadata=suggestion.metadata.to_dict(),
            )
            for suggestion in suggestions
        ]

        return SuggestResponse(
            text=request.text,
            items=items,
            lookup_time_ms=(time.time() - start_time) * 1000,
        )

    async def cleanup(self) -> CleanupResponse:
        """Handle POST /cleanup requests.

        Returns:
            CleanupResponse with the sweep outcome
        """
        result = await self._cache.sweep_expired()
        return CleanupResponse(success=result.ok, removed=result.removed, error=result.error)

    async def get_stats(self) -> CacheStatsResponse:
        """Handle GET /stats requests.

        Returns:
            CacheStatsResponse with cache statistics

        Raises:
            HTTPException: If the vector store cannot be queried
        """
        try:
            stats = await self._cache.get_stats()
        except OptiLLMError as e:
            raise _http_error(e, "get stats") from e

        return CacheStatsResponse(
            collection_name=stats["collection_name"],
            total_entries=stats.get("total_entries", 0),
            threshold=stats["similarity_threshold"],
            ttl_seconds=stats["ttl_seconds"],
            embedding_provider=stats["embedding_provider"],
            embedding_model=stats["embedding_model"],
            embedding_dimension=stats.get("embedding_dimension"),
        )

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests.

        Returns:
            HealthCheckResponse with health status
        """
        is_healthy = await self._cache.is_healthy()

        return HealthCheckResponse(
            status="healthy" if is_healthy else "unhealthy",
            cache_healthy=is_healthy,
        )
