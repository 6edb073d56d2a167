"""ASGI entry point: ``uvicorn voting_portal.main:create_app --factory``."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from voting_portal import __version__
from voting_portal.api.errors import register_exception_handlers
from voting_portal.core.config import get_settings
from voting_portal.core.database import dispose_engine, init_engine
from voting_portal.core.logging import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Open the database engine for the life of the server process."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_dir)
    init_engine(
        settings.database_url,
        echo=False,
        schema=settings.database_schema,
        busy_timeout=settings.database_busy_timeout,
    )
    logger.info(f"Voting portal started ({settings.environment})")

    yield

    await dispose_engine()


def create_app() -> FastAPI:
    """Build the portal app: error mapping, middleware and versioned routes."""
    settings = get_settings()

    app = FastAPI(
        title="Voting Portal",
        description="Online elections with a one-ballot-per-voter integrity guarantee",
        version=__version__,
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    from voting_portal.api.router import create_router, setup_middleware

    setup_middleware(app, settings)
    app.include_router(create_router(settings))

    return app
