"""Response DTOs for API endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class ChatMetadata(BaseModel):
    """Request context echoed back with a chat response."""

    user_id: str
    tenant_id: str
    timestamp: str = Field(..., description="ISO 8601 time the response was served")


class ChatResponse(BaseModel):
    """Response DTO for the cached chat endpoint."""

    response: str = Field(..., description="The cached or freshly generated response")
    cached: bool = Field(..., description="Whether the response came from the cache")
    cost_saved: bool = Field(..., description="Whether the upstream call was skipped")
    duration_ms: float = Field(..., description="Time taken to serve the request in milliseconds")
    metadata: ChatMetadata


class SuggestionItem(BaseModel):
    """Single suggestion (in items array)."""

    id: str = Field(..., description="The cache entry id")
    prompt: str | None = Field(None, description="The original prompt of the cache entry")
    response: str | None = Field(None, description="The cached response")
    score: float = Field(
        ...,
        description="Cosine similarity (1 = identical, 0 = unrelated)",
        ge=0.0,
        le=1.0,
    )
    created_at: float = Field(..., description="Timestamp when the entry was cached (Unix timestamp)")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Stored scoping metadata")


class SuggestResponse(BaseModel):
    """Response DTO for typeahead suggestions."""

    text: str = Field(..., description="The original query text")
    items: list[SuggestionItem] = Field(
        default_factory=list,
        description="Suggestions sorted by score, best first",
    )
    lookup_time_ms: float = Field(..., description="Time taken for the lookup in milliseconds")


class CleanupResponse(BaseModel):
    """Response DTO for the expiry sweep."""

    success: bool = Field(..., description="Whether the sweep finished without error")
    removed: int = Field(..., description="Number of expired entries removed", ge=0)
    error: str | None = Field(None, description="Failure description, if any")


class CacheStatsResponse(BaseModel):
    """Response DTO for cache statistics."""

    collection_name: str = Field(..., description="Name of the vector collection")
    total_entries: int = Field(..., description="Total number of cached entries", ge=0)
    threshold: float = Field(
        ...,
        description="Default similarity threshold",
        ge=0.0,
        le=1.0,
    )
    ttl_seconds: int = Field(..., description="Default time-to-live in seconds", ge=0)
    embedding_provider: str = Field(..., description="Configured embedding provider")
    embedding_model: str = Field(..., description="Embedding model identifier")
    embedding_dimension: int | None = Field(None, description="Probed embedding dimension")


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'unhealthy'")
    cache_healthy: bool = Field(..., description="Whether the vector store and embeddings are reachable")
