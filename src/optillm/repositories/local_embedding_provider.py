"""Local hashing embedding provider.

This is the default embedding provider. It needs no model download and no
network access, and it is fully deterministic, which makes it suitable for
tests and for deployments without an embedding API.

Each whitespace token of the lowercased text is hashed into one of
``dimension`` buckets; the bucket counts are L2-normalised. The cosine
similarity of two vectors is therefore a hashed bag-of-words overlap.
"""

import numpy as np

DEFAULT_DIMENSION = 384


def token_hash(token: str) -> int:
    """Stable 32-bit polynomial rolling hash of ``token``.

    Computes ``h = h * 31 + code_point`` with signed 32-bit wraparound and
    returns the absolute value, so the result is identical across runs and
    processes (unlike the built-in ``hash``).
    """
    h = 0
    for char in token:
        h = (h * 31 + ord(char)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


def hash_embedding(text: str, dimension: int = DEFAULT_DIMENSION) -> list[float]:
    """Embed ``text`` as a normalised hashed term-frequency vector.

    Args:
        text: The text to embed
        dimension: Length of the returned vector

    Returns:
        A unit vector of length ``dimension``, or the zero vector when the
        text has no tokens
    """
    vector = np.zeros(dimension, dtype=np.float64)
    for token in text.lower().split():
        vector[token_hash(token) % dimension] += 1.0

    norm = np.linalg.norm(vector)
    if norm == 0:
        return vector.tolist()
    return (vector / norm).tolist()


class LocalEmbeddingProvider:
    """Hashing implementation of EmbeddingProvider.

    This class satisfies the EmbeddingProvider protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(self, dimension: int = DEFAULT_DIMENSION) -> None:
        """Initialize the local embedding provider.

        Args:
            dimension: Length of the produced vectors.
        """
        if dimension < 1:
            raise ValueError(f"dimension must be positive, got {dimension}")
        self._dimension = dimension

    @classmethod
    def create(cls, dimension: int = DEFAULT_DIMENSION) -> "LocalEmbeddingProvider":
        """Factory method to create LocalEmbeddingProvider with defaults.

        Args:
            dimension: Vector length.

        Returns:
            Configured LocalEmbeddingProvider
        """
        return cls(dimension=dimension)

    @property
    def dimension(self) -> int:
        """Get the embedding vector dimension."""
        return self._dimension

    @property
    def model_name(self) -> str:
        """Get the model name/identifier."""
        return f"hashing-bow-{self._dimension}"

    async def encode(self, text: str) -> list[float]:
        """Generate embedding vector for a single text.

        Args:
            text: The text to encode

        Returns:
            The embedding vector as a list of floats
        """
        return hash_embedding(text, self._dimension)

    async def is_available(self) -> bool:
        """The hashing provider has no external dependency."""
        return True
