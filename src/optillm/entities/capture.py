"""Capture request and result entities."""

from dataclasses import dataclass

from .cache_record import RecordMetadata


@dataclass(frozen=True)
class CachePolicy:
    """Per-call overrides of the engine defaults.

    Attributes:
        max_age: Maximum age in seconds of a reusable record; also the TTL
            of a newly written record. 0 disables freshness gating.
        min_similarity: Minimum cosine similarity for a hit (0-1)
    """

    max_age: int | None = None
    min_similarity: float | None = None

    def __post_init__(self) -> None:
        if self.max_age is not None and self.max_age < 0:
            raise ValueError("max_age must not be negative")
        if self.min_similarity is not None and not 0 <= self.min_similarity <= 1:
            raise ValueError("min_similarity must be between 0 and 1")


@dataclass(frozen=True)
class CaptureRequest:
    """An incoming request for a possibly cached result."""

    prompt: str
    metadata: RecordMetadata
    policy: CachePolicy | None = None


@dataclass(frozen=True)
class CaptureResult:
    """Outcome of a capture call.

    Attributes:
        payload: The reused or freshly produced result
        cached: True when the payload came from the cache
        cost_saved: True when the producer was not invoked
        score: Similarity of the reused record (hits only)
        record_id: Id of the reused record on a hit, of the new record on a miss
    """

    payload: str
    cached: bool
    cost_saved: bool
    score: float | None = None
    record_id: str | None = None
