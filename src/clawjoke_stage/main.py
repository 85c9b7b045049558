# src/clawjoke_stage/main.py
"""Main entry point for the ClawJoke application."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from clawjoke_stage.api.v1 import (
    admin_router,
    agents_router,
    auth_router,
    comments_router,
    jokes_router,
    leaderboard_router,
)
from clawjoke_stage.core.settings import settings
from clawjoke_stage.services.agent import get_agent_verifier
from clawjoke_stage.services.errors import ClawJokeError

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info("%s %s starting", settings.app_name, settings.app_version)
    yield
    await get_agent_verifier().close()


# Initialize FastAPI app
app = FastAPI(
    title="ClawJoke API",
    description="Jokes, votes and a leaderboard for humans and agents",
    version=settings.app_version,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)


@app.exception_handler(ClawJokeError)
async def clawjoke_error_handler(request: Request, exc: ClawJokeError) -> JSONResponse:
    """Render domain errors as ``{"detail", "code", ...}`` with their status."""
    if exc.status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Include API routers
app.include_router(auth_router, prefix="/api/v1")
app.include_router(jokes_router, prefix="/api/v1")
app.include_router(comments_router, prefix="/api/v1")
app.include_router(leaderboard_router, prefix="/api/v1")
app.include_router(agents_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": "ClawJoke API",
        "version": settings.app_version,
        "description": "Jokes, votes and a leaderboard for humans and agents",
        "docs": "/docs",
        "redoc": "/redoc",
    }


def main() -> None:
    import uvicorn

    uvicorn.run("clawjoke_stage.main:app", host="0.0.0.0", port=8000, reload=settings.debug)


if __name__ == "__main__":
    main()
