"""OptiLLM - similarity cache for expensive LLM calls.

This package provides a layered architecture for semantic result caching:

Layers:
    - protocols: Interface contracts (EmbeddingProvider, VectorStore)
    - repositories: Data access implementations (hashing/OpenAI/Ollama embeddings, Redis)
    - services: Business logic (cache decision engine, suggestions)
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from optillm import CacheService, CaptureRequest, RecordMetadata
    from optillm.repositories import LocalEmbeddingProvider, RedisVectorStore

    cache = CacheService.create(
        repository=RedisVectorStore.create(settings),
        embedding_provider=LocalEmbeddingProvider.create(),
        config=settings.engine_config(),
    )
    await cache.initialize()

    result = await cache.capture(
        CaptureRequest(prompt="What is Redis?", metadata=RecordMetadata("openai", "gpt-4o-mini")),
        lambda: call_llm("What is Redis?"),
    )
    ```

For HTTP API:
    ```python
    from optillm.api.app import app
    ```
"""

from optillm.config import EngineConfig, Settings, get_settings
from optillm.entities import (
    CacheMatch,
    CachePolicy,
    CacheRecord,
    CaptureRequest,
    CaptureResult,
    RecordMetadata,
    ScopeFilter,
    Suggestion,
    SuggestQuery,
    SweepResult,
)
from optillm.exceptions import (
    ConfigurationError,
    DimensionMismatchError,
    EmbeddingError,
    OptiLLMError,
    ProducerError,
    StoreUnavailableError,
)
from optillm.protocols import EmbeddingProvider, VectorStore
from optillm.repositories import LocalEmbeddingProvider, RedisVectorStore
from optillm.services import CacheService, EmbeddingService, SuggestionService

__all__ = [
    # Configuration
    "EngineConfig",
    "Settings",
    "get_settings",
    # Protocols (interfaces)
    "EmbeddingProvider",
    "VectorStore",
    # Services (business logic)
    "CacheService",
    "EmbeddingService",
    "SuggestionService",
    # Repositories (data access)
    "LocalEmbeddingProvider",
    "RedisVectorStore",
    # Entities (domain models)
    "CacheMatch",
    "CachePolicy",
    "CacheRecord",
    "CaptureRequest",
    "CaptureResult",
    "RecordMetadata",
    "ScopeFilter",
    "Suggestion",
    "SuggestQuery",
    "SweepResult",
    # Errors
    "OptiLLMError",
    "ConfigurationError",
    "DimensionMismatchError",
    "EmbeddingError",
    "ProducerError",
    "StoreUnavailableError",
]
