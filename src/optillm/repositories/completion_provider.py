"""Producers for the expensive generation call.

The cache engine accepts any zero-argument coroutine function as a producer;
these classes are the ones the HTTP API wires in.
"""

from typing import Protocol, runtime_checkable

import openai

from optillm.exceptions import ProducerError
from optillm.utils import get_logger

logger = get_logger(__name__)


@runtime_checkable
class CompletionProvider(Protocol):
    """Protocol for text generation backends."""

    @property
    def provider(self) -> str:
        """Name of the upstream provider, stored as record metadata."""
        ...

    @property
    def model_name(self) -> str:
        """Name of the upstream model, stored as record metadata."""
        ...

    async def complete(self, prompt: str) -> str:
        """Generate a response for ``prompt``."""
        ...


class OpenAICompletionProvider:
    """OpenAI chat completion producer."""

    def __init__(
        self,
        api_key: str | None,
        model_name: str = "gpt-4o-mini",
        temperature: float = 0.7,
        max_tokens: int = 500,
        client: openai.AsyncOpenAI | None = None,
    ) -> None:
        self._model_name = model_name
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._client = client or openai.AsyncOpenAI(api_key=api_key)

    @classmethod
    def create(cls, api_key: str, model_name: str = "gpt-4o-mini") -> "OpenAICompletionProvider":
        return cls(api_key=api_key, model_name=model_name)

    @property
    def provider(self) -> str:
        return "openai"

    @property
    def model_name(self) -> str:
        return self._model_name

    async def complete(self, prompt: str) -> str:
        """Call the chat completions API.

        Raises:
            ProducerError: If the API call fails
        """
        try:
            completion = await self._client.chat.completions.create(
                model=self._model_name,
                messages=[{"role": "user", "content": prompt}],
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
        except openai.OpenAIError as e:
            logger.error("completion_failed", model=self._model_name, error=str(e))
            raise ProducerError(f"Completion request failed: {e}") from e

        return completion.choices[0].message.content or "No response"


class EchoCompletionProvider:
    """Offline producer returning a canned response, for running without an API key."""

    @property
    def provider(self) -> str:
        return "mock"

    @property
    def model_name(self) -> str:
        return "echo"

    async def complete(self, prompt: str) -> str:
        return f'Mock response for: "{prompt}"'
