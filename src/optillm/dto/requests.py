"""Request DTOs for API endpoints."""

from pydantic import BaseModel, Field


class CachePolicyModel(BaseModel):
    """Per-request overrides of the cache defaults."""

    max_age: int | None = Field(
        None,
        description="Maximum age in seconds of a reusable entry, also the TTL of a new entry (0 = no limit)",
        ge=0,
    )
    min_similarity: float | None = Field(
        None,
        description="Minimum cosine similarity for a cache hit (0-1, higher = more strict)",
        ge=0.0,
        le=1.0,
    )


class ChatRequest(BaseModel):
    """Request DTO for the cached chat endpoint.

    The handler will convert this to a capture call on the service layer.
    """

    prompt: str = Field(..., description="The user prompt", min_length=1)
    user_id: str = Field("anonymous", description="User the response is produced for")
    tenant_id: str = Field("default", description="Tenant; cache entries never cross tenants")
    policy: CachePolicyModel | None = Field(None, description="Optional cache policy overrides")


class SuggestRequest(BaseModel):
    """Request DTO for typeahead suggestions."""

    text: str = Field(..., description="The partial query text", min_length=1)
    tenant_id: str | None = Field(None, description="Restrict suggestions to this tenant")
    limit: int = Field(5, description="Maximum number of suggestions", ge=1, le=50)
    min_similarity: float = Field(
        0.7,
        description="Minimum cosine similarity of a suggestion (0-1)",
        ge=0.0,
        le=1.0,
    )
