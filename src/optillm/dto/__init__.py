"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract.
They are used for request/response validation and serialization.

Internal domain logic should use entities from the entities package.
"""

from .requests import CachePolicyModel, ChatRequest, SuggestRequest
from .responses import (
    CacheStatsResponse,
    ChatMetadata,
    ChatResponse,
    CleanupResponse,
    HealthCheckResponse,
    SuggestionItem,
    SuggestResponse,
)

__all__ = [
    "CachePolicyModel",
    "ChatRequest",
    "SuggestRequest",
    "ChatMetadata",
    "ChatResponse",
    "SuggestionItem",
    "SuggestResponse",
    "CleanupResponse",
    "CacheStatsResponse",
    "HealthCheckResponse",
]
