"""Select the embedding and completion providers from settings."""

from optillm.config import Settings
from optillm.exceptions import ConfigurationError
from optillm.protocols import EmbeddingProvider

from .completion_provider import CompletionProvider, EchoCompletionProvider, OpenAICompletionProvider
from .local_embedding_provider import LocalEmbeddingProvider
from .ollama_embedding_provider import OllamaEmbeddingProvider
from .openai_embedding_provider import OpenAIEmbeddingProvider

# "remote" is the provider-neutral name for the hosted embedding API
PROVIDER_ALIASES = {"remote": "openai"}

EMBEDDING_PROVIDERS = ("local", "openai", "ollama")


def resolve_provider_name(name: str) -> str:
    """Normalise a configured provider name.

    Raises:
        ConfigurationError: If the name is not a known provider
    """
    key = name.strip().lower()
    key = PROVIDER_ALIASES.get(key, key)
    if key not in EMBEDDING_PROVIDERS:
        raise ConfigurationError(
            f"Unknown embedding provider {name!r}; expected one of "
            f"{', '.join(EMBEDDING_PROVIDERS + tuple(PROVIDER_ALIASES))}"
        )
    return key


def create_embedding_provider(settings: Settings) -> EmbeddingProvider:
    """Build the embedding provider selected by ``settings.embedding_provider``.

    Raises:
        ConfigurationError: If the provider is unknown or lacks its credential
    """
    name = resolve_provider_name(settings.embedding_provider)

    if name == "openai":
        if not settings.openai_api_key:
            raise ConfigurationError("OPENAI_API_KEY is required for the remote embedding provider")
        return OpenAIEmbeddingProvider.create(
            api_key=settings.openai_api_key,
            model_name=settings.embedding_model,
        )

    if name == "ollama":
        return OllamaEmbeddingProvider.create(
            model_name=settings.embedding_model,
            base_url=settings.ollama_base_url,
        )

    return LocalEmbeddingProvider.create(dimension=settings.embedding_dimension)


def create_completion_provider(settings: Settings) -> CompletionProvider:
    """Use OpenAI chat completions when a key is configured, else the echo producer."""
    if settings.openai_api_key:
        return OpenAICompletionProvider.create(
            api_key=settings.openai_api_key,
            model_name=settings.completion_model,
        )
    return EchoCompletionProvider()
