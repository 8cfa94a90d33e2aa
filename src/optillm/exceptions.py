"""Exceptions raised by the cache engine and its collaborators."""


class OptiLLMError(Exception):
    """Base exception for the cache engine."""

    pass


class ConfigurationError(OptiLLMError):
    """Raised when the selected embedding provider is misconfigured."""

    pass


class EmbeddingError(OptiLLMError):
    """Raised when a remote embedding provider cannot produce a vector."""

    pass


class DimensionMismatchError(OptiLLMError):
    """Raised when a provider returns a vector of the wrong length."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Embedding dimension mismatch: collection expects {expected}, provider returned {actual}"
        )


class StoreUnavailableError(OptiLLMError):
    """Raised when the vector store cannot be reached or rejects a command."""

    pass


class ProducerError(OptiLLMError):
    """Raised by the bundled producers when the expensive call fails."""

    pass
