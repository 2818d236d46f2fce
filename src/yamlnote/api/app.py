"""FastAPI application factory for the yamlnote document engine."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from yamlnote import __version__
from yamlnote.api.deps import init_engine, reset_engine
from yamlnote.api.middleware import RequestBodyLimitMiddleware, RequestTimingMiddleware
from yamlnote.api.routers import documents
from yamlnote.api.schemas import HealthResponse
from yamlnote.service.engine import DocumentEngine
from yamlnote.settings import Settings


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Create the DocumentEngine for the application's lifetime."""
    settings: Settings = app.state.settings
    init_engine(DocumentEngine(settings))
    try:
        yield
    finally:
        reset_engine()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    if settings is None:
        settings = Settings()

    app = FastAPI(
        title="yamlnote",
        description="Parses, validates, converts and diffs structured YAML documents.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Middleware
    app.add_middleware(RequestBodyLimitMiddleware, max_bytes=settings.max_request_bytes)
    app.add_middleware(RequestTimingMiddleware)

    app.include_router(documents.router, tags=["documents"])

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__)

    return app


def main() -> None:
    """Run the REST API server using settings from environment / .env file."""
    settings = Settings()

    logging.basicConfig(level=settings.log_level.upper())
    logger = logging.getLogger("yamlnote.api")
    logger.info(
        "yamlnote API server v%s starting (host=%s, port=%d)",
        __version__, settings.api_server_host, settings.effective_port,
    )

    uvicorn.run(
        "yamlnote.api.app:create_app",
        factory=True,
        host=settings.api_server_host,
        port=settings.effective_port,
        log_level=settings.log_level.lower(),
    )
