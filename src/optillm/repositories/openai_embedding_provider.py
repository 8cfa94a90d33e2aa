"""OpenAI embedding provider.

Remote, model-backed provider. Vectors are not guaranteed to be identical
across calls, but their length is fixed for a given model.
"""

import openai

from optillm.exceptions import ConfigurationError, EmbeddingError
from optillm.utils import get_logger

logger = get_logger(__name__)

DEFAULT_OPENAI_EMBEDDING_MODEL = "text-embedding-3-small"


class OpenAIEmbeddingProvider:
    """OpenAI implementation of EmbeddingProvider protocol.

    Example:
        ```python
        provider = OpenAIEmbeddingProvider.create(api_key="sk-...")
        embedding = await provider.encode("Hello, world!")
        print(len(embedding))  # 1536
        ```
    """

    def __init__(
        self,
        api_key: str | None,
        model_name: str = DEFAULT_OPENAI_EMBEDDING_MODEL,
        client: openai.AsyncOpenAI | None = None,
    ) -> None:
        """Initialize the OpenAI embedding provider.

        Args:
            api_key: OpenAI API key (required).
            model_name: Embedding model name.
            client: Optional preconfigured async client.

        Raises:
            ConfigurationError: If no API key is given.
        """
        if not api_key and client is None:
            raise ConfigurationError("OpenAI API key required for the remote embedding provider")
        self._model_name = model_name
        self._client = client or openai.AsyncOpenAI(api_key=api_key)

    @classmethod
    def create(
        cls,
        api_key: str | None,
        model_name: str = DEFAULT_OPENAI_EMBEDDING_MODEL,
    ) -> "OpenAIEmbeddingProvider":
        """Factory method to create OpenAIEmbeddingProvider."""
        return cls(api_key=api_key, model_name=model_name)

    @property
    def model_name(self) -> str:
        """Get the model name/identifier."""
        return self._model_name

    async def encode(self, text: str) -> list[float]:
        """Generate embedding vector for a single text.

        Newlines are replaced by spaces before sending.

        Raises:
            EmbeddingError: If the API call fails
        """
        try:
            response = await self._client.embeddings.create(
                model=self._model_name,
                input=text.replace("\n", " ").strip(),
            )
        except openai.OpenAIError as e:
            logger.error("openai_embedding_failed", model=self._model_name, error=str(e))
            raise EmbeddingError(f"Failed to generate embedding: {e}") from e
        return list(response.data[0].embedding)

    async def is_available(self) -> bool:
        """Check if the API answers an embedding request."""
        try:
            await self.encode("test")
            return True
        except EmbeddingError:
            return False

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.close()
