"""
Search Server Application Entry Point

This module defines the FastAPI application instance, registers all routers,
configures logging and global exception handling, and provides a
test-friendly application factory.

Design Goals
------------
- Deterministic startup
- Centralized router registration
- Structured SearchError responses plus a global exception safety net
- Test-friendly via create_app()
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from .config import settings
from .core.errors import SearchError, search_error_handler, unhandled_exception_handler
from .api.dependencies import get_document_cache

from .api import (
    data_routes,
    health_routes,
    mcp_routes,
    search_routes,
)


logger = logging.getLogger("search.app")


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Warm the document cache so the first tool call does not pay the fetch.

    A failed preload is logged and retried lazily on the first query.
    """
    logger.info("Starting security-search server")

    if settings.preload_on_startup:
        try:
            snapshot = await get_document_cache().get_snapshot()
            logger.info("Metadata preloaded: %d articles", len(snapshot))
        except SearchError as exc:
            logger.warning("Metadata preload failed: %s", exc.message)

    yield

    logger.info("Shutting down security-search server")


# ---------------------------------------------------------------------
# Application Factory (Test-Friendly)
# ---------------------------------------------------------------------

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns
    -------
    FastAPI
        Fully configured FastAPI application.
    """
    configure_logging()

    app = FastAPI(
        title="security-search-mcp",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # --------------------------------------------------------------
    # Exception Handling
    # --------------------------------------------------------------

    app.add_exception_handler(SearchError, search_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # --------------------------------------------------------------
    # Router Registration
    # --------------------------------------------------------------

    app.include_router(health_routes.router)
    app.include_router(mcp_routes.router)
    app.include_router(search_routes.router)
    app.include_router(data_routes.router)

    return app


# ---------------------------------------------------------------------
# Default Application Instance (for Uvicorn)
# ---------------------------------------------------------------------

app = create_app()


def run() -> None:
    uvicorn.run(app, host=settings.host, port=settings.port)
