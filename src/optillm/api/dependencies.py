"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services stored in app.state during lifespan
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state
"""

import asyncio
import contextlib
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from optillm.config import get_settings
from optillm.handlers import CacheHandler
from optillm.repositories import RedisVectorStore, create_completion_provider, create_embedding_provider
from optillm.services import CacheService, SuggestionService
from optillm.utils import configure_logging, get_logger

logger = get_logger(__name__)


def get_handler(request: Request) -> CacheHandler:
    """Dependency injection for CacheHandler from app.state.

    Raises:
        RuntimeError: If handler is not initialized
    """
    handler = getattr(request.app.state, "cache_handler", None)
    if handler is None:
        raise RuntimeError("CacheHandler not initialized. Check lifespan setup.")
    return handler


async def run_periodic_sweep(cache_service: CacheService, interval: float) -> None:
    """Sweep expired entries every ``interval`` seconds until cancelled."""
    while True:
        await asyncio.sleep(interval)
        await cache_service.sweep_expired()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Initializes all layers and stores in app.state:
    1. Embedding provider and vector store (data access)
    2. Services (business logic) - app.state.cache_service
    3. Handler (HTTP endpoints) - app.state.cache_handler

    Also runs the periodic expiry sweep while the app is up.
    """
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_json)

    embedding_provider = create_embedding_provider(settings)
    repository = RedisVectorStore.create(settings)

    cache_service = CacheService.create(
        repository=repository,
        embedding_provider=embedding_provider,
        config=settings.engine_config(),
    )
    dimension = await cache_service.initialize()

    suggestion_service = SuggestionService(
        repository=repository,
        embeddings=cache_service.embeddings,
    )
    cache_handler = CacheHandler(
        cache_service=cache_service,
        suggestion_service=suggestion_service,
        completion_provider=create_completion_provider(settings),
    )

    # Store in app.state (FastAPI pattern)
    app.state.cache_service = cache_service
    app.state.cache_handler = cache_handler

    sweeper = None
    if settings.cache_sweep_interval:
        sweeper = asyncio.create_task(run_periodic_sweep(cache_service, settings.cache_sweep_interval))

    logger.info(
        "cache_service_started",
        collection=settings.cache_collection_name,
        embedding_provider=settings.embedding_provider,
        dimension=dimension,
        threshold=settings.cache_similarity_threshold,
        ttl=settings.cache_ttl,
    )

    yield

    if sweeper is not None:
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper

    close = getattr(embedding_provider, "close", None)
    if close is not None:
        await close()
    await repository.close()

    del app.state.cache_handler
    del app.state.cache_service
    logger.info("cache_service_stopped")


# Type aliases for cleaner dependency injection
HandlerDep = Annotated[CacheHandler, Depends(get_handler)]
