"""Repository layer for data access.

This layer abstracts external dependencies (Redis, embedding APIs, the
upstream generation API) behind protocol-based interfaces. This enables:
- Easy swapping of implementations (hashing → OpenAI embeddings, etc.)
- Unit testing with in-memory implementations
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.
"""

from optillm.protocols import EmbeddingProvider, VectorStore

from .completion_provider import CompletionProvider, EchoCompletionProvider, OpenAICompletionProvider
from .local_embedding_provider import LocalEmbeddingProvider, hash_embedding
from .ollama_embedding_provider import OllamaEmbeddingProvider
from .openai_embedding_provider import OpenAIEmbeddingProvider
from .provider_factory import create_completion_provider, create_embedding_provider, resolve_provider_name
from .redis_repository import RedisVectorStore

__all__ = [
    "EmbeddingProvider",
    "VectorStore",
    "CompletionProvider",
    "EchoCompletionProvider",
    "OpenAICompletionProvider",
    "LocalEmbeddingProvider",
    "hash_embedding",
    "OllamaEmbeddingProvider",
    "OpenAIEmbeddingProvider",
    "RedisVectorStore",
    "create_completion_provider",
    "create_embedding_provider",
    "resolve_provider_name",
]
