"""
HealthTrackerAI FastAPI Application Entry Point

Main application initialization with:
- Lifespan management (startup/shutdown)
- CORS configuration
- Error handling and rate limiting middleware
- Router registration
- Health and metrics endpoints
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from healthtracker import __version__
from healthtracker.api.dependencies import TICKET_SESSION_HEADER
from healthtracker.api.middleware.error_handler import (
    CORRELATION_HEADER,
    ErrorHandlerMiddleware,
    register_exception_handlers,
)
from healthtracker.api.middleware.rate_limiter import RateLimitConfig, RateLimitMiddleware
from healthtracker.api.router import api_router
from healthtracker.api.routes.health import mark_startup_complete, router as health_router
from healthtracker.config import get_settings
from healthtracker.config.logging_config import configure_logging, get_logger
from healthtracker.infrastructure.database import get_db_manager
from healthtracker.infrastructure.firebase import get_firebase_client
from healthtracker.infrastructure.metrics import metrics_router, update_system_info
from healthtracker.infrastructure.monitoring import init_sentry

# Initialize settings and logging
settings = get_settings()
configure_logging(settings)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Handles startup and shutdown of all services.
    """
    logger.info(
        "Starting HealthTrackerAI application",
        env=settings.env,
        version=__version__,
    )

    try:
        init_sentry(
            settings.sentry_dsn.get_secret_value(),
            environment=settings.env,
            release=f"healthtracker@{__version__}",
        )
        update_system_info(settings.env, __version__)

        db = get_db_manager()
        await db.initialize()
        logger.info("Database connection initialized")

        # Missing credentials only disable admin and push routes
        get_firebase_client().initialize()

        mark_startup_complete()
        yield

    finally:
        logger.info("Shutting down HealthTrackerAI application")

        await get_db_manager().close()

        logger.info("HealthTrackerAI application shutdown complete")


def create_application() -> FastAPI:
    """
    Create and configure FastAPI application.

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="HealthTrackerAI API",
        description="Nutrition and workout tracking backend with AI coaching",
        version=__version__,
        docs_url="/docs" if not settings.is_production() else None,
        redoc_url="/redoc" if not settings.is_production() else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        RateLimitMiddleware,
        config=RateLimitConfig(
            requests_per_minute=settings.rate_limit.requests_per_minute,
            admin_requests_per_minute=settings.rate_limit.admin_requests_per_minute,
            burst_size=settings.rate_limit.burst_size,
            admin_prefix=f"{settings.api_prefix}/admin",
            trust_forwarded_for=settings.rate_limit.trust_forwarded_for,
        ),
    )

    # Wraps the rate limiter so rejections also carry a correlation id
    app.add_middleware(ErrorHandlerMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[CORRELATION_HEADER, TICKET_SESSION_HEADER],
    )

    register_exception_handlers(app)

    app.include_router(api_router, prefix=settings.api_prefix)
    app.include_router(health_router)
    app.include_router(metrics_router)

    @app.get("/", include_in_schema=False)
    async def root() -> dict:
        return {
            "name": "HealthTrackerAI API",
            "version": __version__,
            "status": "operational",
        }

    return app


# Create application instance
app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "healthtracker.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.env == "development",
        log_level=settings.log_level.lower(),
    )
