from typing import Any

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from optillm.api.dependencies import HandlerDep, lifespan
from optillm.config import get_settings
from optillm.dto import (
    CacheStatsResponse,
    ChatRequest,
    ChatResponse,
    CleanupResponse,
    HealthCheckResponse,
    SuggestRequest,
    SuggestResponse,
)

app = FastAPI(
    title="OptiLLM Cache API",
    description="Similarity cache in front of LLM completions, backed by Redis vector search",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,  # type: ignore[arg-type]
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint with API information."""
    return {
        "name": "OptiLLM Cache API",
        "version": "0.1.0",
        "endpoints": {
            "chat": "POST /chat - send a prompt, get a cached or fresh response",
            "suggest": "POST /suggest - typeahead over cached prompts",
            "cleanup": "POST /cleanup - remove expired cache entries",
            "stats": "GET /stats",
            "health": "GET /health",
            "docs": "/docs",
        },
    }


@app.get("/health", response_model=HealthCheckResponse)
async def health(handler: HandlerDep) -> JSONResponse:
    """Health check endpoint (503 when unhealthy)."""
    result = await handler.health_check()
    code = status.HTTP_200_OK if result.cache_healthy else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=code, content=result.model_dump())


@app.post("/chat", response_model=ChatResponse)
async def chat(request: ChatRequest, handler: HandlerDep) -> ChatResponse:
    """Answer a prompt, reusing a cached response when a similar fresh one exists."""
    return await handler.chat(request)


@app.post("/suggest", response_model=SuggestResponse)
async def suggest(request: SuggestRequest, handler: HandlerDep) -> SuggestResponse:
    """Rank cached prompts similar to the given text."""
    return await handler.suggest(request)


@app.post("/cleanup", response_model=CleanupResponse)
async def cleanup(handler: HandlerDep) -> CleanupResponse:
    """Remove expired cache entries."""
    return await handler.cleanup()


@app.get("/stats", response_model=CacheStatsResponse)
async def get_stats(handler: HandlerDep) -> CacheStatsResponse:
    """Get cache statistics."""
    return await handler.get_stats()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "optillm.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
