"""
Main FastAPI application.

This is the entry point for the API server.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from talent_search.core.config import settings
from talent_search.db.session import engine
from talent_search.errors import AppError, app_error_handler
from talent_search.routers import embeddings, health, talent_search

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup and dispose the connection pool on shutdown."""
    logger.info("Starting %s...", settings.APP_NAME)

    yield

    logger.info("Shutting down %s...", settings.APP_NAME)
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    description="Semantic player search and embedding refresh for esports recruiting",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_exception_handler(AppError, app_error_handler)

app.include_router(health.router, tags=["Health"])
app.include_router(talent_search.router)
app.include_router(embeddings.router)
