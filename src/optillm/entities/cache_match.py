"""Cache match domain entity."""

from dataclasses import dataclass

from .cache_record import CacheRecord


@dataclass(frozen=True)
class CacheMatch:
    """A single result of a vector similarity search.

    Attributes:
        record: The matched record
        score: Cosine similarity (1 = identical, 0 = unrelated)
    """

    record: CacheRecord
    score: float
