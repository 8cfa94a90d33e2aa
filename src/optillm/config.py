import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv
from redis import asyncio as aioredis

load_dotenv()


@dataclass(frozen=True)
class EngineConfig:
    """Immutable configuration handed to the cache services.

    Attributes:
        collection_name: Name of the vector store collection
        default_ttl_seconds: Max age and write TTL when a request has no policy
        default_similarity_threshold: Minimum cosine similarity for a hit (0-1)
        embedding_provider: Name of the selected embedding provider
    """

    collection_name: str = "llm_cache"
    default_ttl_seconds: int = 3600
    default_similarity_threshold: float = 0.85
    embedding_provider: str = "local"

    def __post_init__(self) -> None:
        if not 0 <= self.default_similarity_threshold <= 1:
            raise ValueError("default_similarity_threshold must be between 0 and 1")
        if self.default_ttl_seconds < 0:
            raise ValueError("default_ttl_seconds must not be negative")


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Redis
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")

    # Cache
    cache_collection_name: str = os.getenv("CACHE_COLLECTION_NAME", "llm_cache")
    cache_ttl: int = int(os.getenv("CACHE_TTL", "3600"))  # 1 hour default
    cache_similarity_threshold: float = float(os.getenv("CACHE_SIMILARITY_THRESHOLD", "0.85"))
    cache_sweep_interval: int = int(os.getenv("CACHE_SWEEP_INTERVAL", "300"))

    # Embedding: "local", "remote" (alias of "openai"), "openai" or "ollama"
    embedding_provider: str = os.getenv("EMBEDDING_PROVIDER", "local")
    embedding_model: str = os.getenv("EMBEDDING_MODEL", "text-embedding-3-small")
    # Only used by the local hashing provider
    embedding_dimension: int = int(os.getenv("EMBEDDING_DIMENSION", "384"))

    # Remote providers
    openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
    ollama_base_url: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
    completion_model: str = os.getenv("COMPLETION_MODEL", "gpt-4o-mini")

    # API
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "true").lower() == "true"

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_json: bool = os.getenv("LOG_JSON", "true").lower() == "true"

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if not 0 <= self.cache_similarity_threshold <= 1:
            raise ValueError("CACHE_SIMILARITY_THRESHOLD must be between 0 and 1 for cosine similarity")

        if self.cache_ttl < 0:
            raise ValueError("CACHE_TTL must not be negative")

        if self.cache_sweep_interval < 0:
            raise ValueError("CACHE_SWEEP_INTERVAL must not be negative")

        if self.embedding_dimension < 1:
            raise ValueError(f"EMBEDDING_DIMENSION must be positive, got {self.embedding_dimension}")

    def engine_config(self) -> EngineConfig:
        """Build the immutable engine configuration from these settings."""
        return EngineConfig(
            collection_name=self.cache_collection_name,
            default_ttl_seconds=self.cache_ttl,
            default_similarity_threshold=self.cache_similarity_threshold,
            embedding_provider=self.embedding_provider,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def get_redis_client(settings: Settings) -> aioredis.Redis:
    """Create an asyncio Redis client instance."""
    return aioredis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=False,
    )
