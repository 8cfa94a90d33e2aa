"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (hashing → OpenAI embeddings, Redis → another index)
- Unit testing with in-memory implementations
- Clear separation of concerns
"""

from .embedding_provider import EmbeddingProvider
from .vector_store import VectorStore

__all__ = [
    "EmbeddingProvider",
    "VectorStore",
]
