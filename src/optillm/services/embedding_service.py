"""Embedding service with a fixed, probed dimension."""

from optillm.exceptions import DimensionMismatchError
from optillm.protocols import EmbeddingProvider
from optillm.utils import get_logger

logger = get_logger(__name__)

PROBE_TEXT = "test"


class EmbeddingService:
    """Wraps an EmbeddingProvider and enforces a constant vector length.

    The length is learned once by embedding a probe text; every later vector
    must have the same length.
    """

    def __init__(self, provider: EmbeddingProvider) -> None:
        """
        Initialize the embedding service.

        Args:
            provider: The embedding provider to wrap.
        """
        self._provider = provider
        self._dimension: int | None = None

    async def probe(self) -> int:
        """Embed a probe text to fix the dimension. Idempotent."""
        if self._dimension is None:
            sample = await self._provider.encode(PROBE_TEXT)
            self._dimension = len(sample)
            logger.info(
                "embedding_dimension_probed",
                model=self._provider.model_name,
                dimension=self._dimension,
            )
        return self._dimension

    async def encode(self, text: str) -> list[float]:
        """Encode text to an embedding vector of the probed dimension.

        Raises:
            DimensionMismatchError: If the provider returns a vector of a
                different length than the probed dimension
        """
        expected = await self.probe()
        vector = await self._provider.encode(text)
        if len(vector) != expected:
            raise DimensionMismatchError(expected, len(vector))
        return vector

    @property
    def dimension(self) -> int | None:
        """The probed dimension, None before the first probe."""
        return self._dimension

    @property
    def provider(self) -> EmbeddingProvider:
        return self._provider

    @property
    def model_name(self) -> str:
        return self._provider.model_name

    async def is_available(self) -> bool:
        return await self._provider.is_available()
