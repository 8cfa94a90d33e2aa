"""Suggestion query and item entities."""

from dataclasses import dataclass

from .cache_record import RecordMetadata


@dataclass(frozen=True)
class SuggestQuery:
    """A typeahead lookup against the cache."""

    text: str
    tenant_id: str | None = None
    limit: int = 5
    min_similarity: float = 0.7

    def __post_init__(self) -> None:
        if self.limit < 1:
            raise ValueError("limit must be at least 1")
        if not 0 <= self.min_similarity <= 1:
            raise ValueError("min_similarity must be between 0 and 1")


@dataclass(frozen=True)
class Suggestion:
    """A ranked suggestion recovered from a cached record."""

    id: str
    prompt: str | None
    payload: str | None
    score: float
    created_at: float
    metadata: RecordMetadata
