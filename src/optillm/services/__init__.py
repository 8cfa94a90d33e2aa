"""Service layer for business logic.

This layer contains the core business logic and orchestration.
Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)

Usage:
    ```python
    from optillm.services import CacheService

    cache = CacheService.create(
        repository=store,
        embedding_provider=provider,
        config=settings.engine_config(),
    )
    await cache.initialize()
    ```
"""

from .cache_service import CacheService, Producer
from .embedding_service import EmbeddingService
from .suggestion_service import SuggestionService

__all__ = [
    "CacheService",
    "EmbeddingService",
    "Producer",
    "SuggestionService",
]
