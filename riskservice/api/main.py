"""
Risk Service API Main Application
=================================

FastAPI application entry point for the risk service.

Features:
    - Pie lookup for risk assessment bases
    - Debounced recalculation triggers
    - Async lifespan management

Usage:
    # Development:
    uvicorn riskservice.api.main:app --reload

    # Production:
    uvicorn riskservice.api.main:app --host 0.0.0.0 --port 9000

Author: Risk Service Team
Version: 1.0.0
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI

from riskservice.config import settings
from riskservice.api.dependencies import ServiceContainer
from riskservice.api.routes import (
    pies_router,
    calculate_router,
    health_router,
)


# Configure structured logging
from riskservice.logging import setup_logging, get_logger, RequestLoggingMiddleware
setup_logging(level=settings.log_level, json_output=not settings.debug)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Handles startup and shutdown of services.
    """
    logger.info("Starting risk service API...")

    container: ServiceContainer = app.state.container
    await container.initialize()

    logger.info("Risk service API started successfully")

    yield

    # Pending recalculations are flushed before connections close
    logger.info("Shutting down risk service API...")
    await container.shutdown()
    logger.info("Risk service API shutdown complete")


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        container: Services to serve; built from settings if omitted

    Returns:
        Configured FastAPI instance
    """
    app = FastAPI(
        title="Risk Service API",
        description=(
            "Calculates patient risk scores from FHIR records and publishes "
            "them back to the FHIR server as RiskAssessment resources.\n\n"
            "Every assessment references a pie: the breakdown of the score "
            "into contributing factors, served from `/pies/{id}`."
        ),
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json"
    )
    app.state.container = container or ServiceContainer(settings)

    # Add structured request logging middleware
    app.add_middleware(RequestLoggingMiddleware)

    # Register routers
    app.include_router(health_router)
    app.include_router(pies_router)
    app.include_router(calculate_router)

    return app


# Create the application instance
app = create_app()


def main() -> None:
    import uvicorn

    uvicorn.run(
        "riskservice.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug
    )


if __name__ == "__main__":
    main()
