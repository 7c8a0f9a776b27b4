"""Reservation coordinator application initialization and configuration."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .clients.availability_client import AvailabilityClient
from .core.config import settings
from .core.exceptions import register_exception_handlers
from .core.middleware import setup_middleware
from .core.observability import (
    instrument_fastapi,
    setup_metrics,
    setup_structured_logging,
    setup_tracing,
)
from .core.seed import seed_reservations, seed_waitlists
from .routers import metrics, reconciliation, reservation, waitlist
from .services.reservation_coordinator import ReservationCoordinator
from .services.reservation_store import ReservationStore

SERVICE_NAME = "reservation-coordinator"

# Configure structured logging
setup_structured_logging()

# Configure traditional logging for compatibility
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)


def build_coordinator(client: AvailabilityClient) -> ReservationCoordinator:
    """Create the coordinator and its local state, seeded when demo data is enabled."""
    if settings.seed_demo_data:
        store = ReservationStore(waitlists=seed_waitlists(), reservations=seed_reservations())
    else:
        store = ReservationStore()
    return ReservationCoordinator(
        availability=client,
        store=store,
        upstream_timeout=settings.availability_timeout_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Builds the availability client and coordinator on startup unless one
    was injected, and closes the client on shutdown.
    """
    logger.info("Starting reservation coordinator")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Availability store: {settings.availability_service_url}")

    client: Optional[AvailabilityClient] = None

    try:
        setup_tracing(SERVICE_NAME)
        setup_metrics(SERVICE_NAME)

        if getattr(app.state, "coordinator", None) is None:
            client = AvailabilityClient(
                base_url=settings.availability_service_url,
                timeout=settings.availability_timeout_seconds,
            )
            app.state.coordinator = build_coordinator(client)
    except Exception as e:
        logger.error(f"Failed to initialize application: {e}")
        raise

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down reservation coordinator")

    if client is not None:
        await client.aclose()
        logger.info("Availability client closed")

    logger.info("Application shutdown complete")


def create_app(coordinator: Optional[ReservationCoordinator] = None) -> FastAPI:
    """
    Create and configure the reservation coordinator application.

    Args:
        coordinator: Pre-built coordinator to serve; built at startup when omitted

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    app = FastAPI(
        title="Reservation Coordinator API",
        description="Table reservations, per-table waitlists and promotion on cancellation",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    app.state.coordinator = coordinator

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    setup_middleware(app, enable_logging=True)

    instrument_fastapi(app)

    register_exception_handlers(app)

    @app.get(
        "/health",
        status_code=status.HTTP_200_OK,
        tags=["Health"],
        summary="Health Check",
        response_model=dict,
    )
    async def health_check():
        """Return service status."""
        return {
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": __version__,
            "environment": settings.environment,
        }

    @app.get(
        "/ready",
        status_code=status.HTTP_200_OK,
        tags=["Health"],
        summary="Readiness Check",
        response_model=dict,
    )
    async def readiness_check():
        """Report whether the coordinator has been built and can take requests."""
        ready = getattr(app.state, "coordinator", None) is not None
        return {
            "status": "ready" if ready else "starting",
            "service": SERVICE_NAME,
            "checks": {
                "coordinator": "ok" if ready else "pending",
                "availability_store": settings.availability_service_url,
            },
        }

    app.include_router(reservation.router)
    app.include_router(waitlist.router)
    app.include_router(reconciliation.router)
    app.include_router(metrics.router)

    logger.info("Reservation coordinator application created and configured")

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "seating.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        access_log=True,
    )
