"""
Main FastAPI application entry point for the Onetime Secret platform.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from onetime.platform.api import api_router, configure_rate_limiting, register_exception_handlers
from onetime.platform.logging import setup_logging
from onetime.platform.redis_client import init_redis, redis_manager, shutdown_redis
from onetime.platform.settings import settings

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Boot: logging, Redis (fatal on failure), then the rate limit registry."""
    setup_logging()
    logger.info(
        "service.startup.begin",
        service=settings.app_name,
        version=settings.app_version,
        environment=settings.environment.value,
    )

    await init_redis()
    configure_rate_limiting(app, settings, redis_manager.get_client())

    logger.info("service.startup.complete", emoji="✅")
    try:
        yield
    finally:
        await shutdown_redis()
        logger.info("service.shutdown.complete")


def create_application() -> FastAPI:
    """Create the FastAPI application."""
    app = FastAPI(
        title="Onetime Secret",
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    register_exception_handlers(app)
    app.include_router(api_router)
    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "onetime.platform.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
    )
