"""
Mantras planning API.

FastAPI server exposing plan creation, execution and task status.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from mantras import __version__
from mantras.core.logging import configure_logging


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """
    Startup and shutdown events.

    Yields:
        None during application runtime.
    """
    configure_logging()
    logger.info("Starting Mantras API...")
    yield
    logger.info("Shutting down Mantras API...")


app = FastAPI(
    title="Mantras API",
    description="Task planning and execution tracking",
    version=__version__,
    lifespan=lifespan,
)


# Import and include routers
from mantras.api.routes import plans, tasks  # noqa: E402

app.include_router(plans.router, prefix="/api/plans", tags=["plans"])
app.include_router(tasks.router, prefix="/api/tasks", tags=["tasks"])


@app.get("/health")
async def health_check() -> dict[str, str]:
    """
    Health check endpoint.

    Returns:
        Health status and version.
    """
    return {"status": "healthy", "version": __version__}


@app.get("/")
async def root() -> dict[str, str]:
    """
    Return API info.
    """
    return {
        "name": "Mantras API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }
