"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by services
and repositories. They are NOT used for API contracts - use DTOs
from the dto package for that.
"""

from .cache_match import CacheMatch
from .cache_record import CacheRecord, RecordMetadata
from .capture import CachePolicy, CaptureRequest, CaptureResult
from .scope import ScopeFilter
from .suggestion import Suggestion, SuggestQuery
from .sweep import SweepResult

__all__ = [
    "CacheMatch",
    "CachePolicy",
    "CaptureRequest",
    "CaptureResult",
    "CacheRecord",
    "RecordMetadata",
    "ScopeFilter",
    "Suggestion",
    "SuggestQuery",
    "SweepResult",
]
