"""Availability store application: owns the per-table availability flag."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, status

from . import __version__
from .core.config import settings
from .core.exceptions import register_exception_handlers
from .core.middleware import setup_middleware
from .core.observability import instrument_fastapi, setup_structured_logging, setup_tracing
from .core.seed import seed_tables
from .routers import tables
from .services.availability_service import InMemoryAvailabilityStore

SERVICE_NAME = "availability-store"

setup_structured_logging()

logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logger.info("Starting availability store")
    setup_tracing(SERVICE_NAME)
    logger.info(f"Serving {len(await app.state.table_store.list_tables())} tables")

    yield

    logger.info("Availability store shutdown complete")


def create_availability_app(store: Optional[InMemoryAvailabilityStore] = None) -> FastAPI:
    """
    Create and configure the availability store application.

    Args:
        store: Table store to serve; seeded from the demo tables when omitted

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    app = FastAPI(
        title="Table Availability API",
        description="Read and update per-table availability",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url=None,
    )

    if store is None:
        store = InMemoryAvailabilityStore(seed_tables() if settings.seed_demo_data else None)
    app.state.table_store = store

    setup_middleware(app, enable_logging=True)
    instrument_fastapi(app)
    register_exception_handlers(app)

    @app.get("/health", status_code=status.HTTP_200_OK, tags=["Health"], response_model=dict)
    async def health_check():
        return {"status": "healthy", "service": SERVICE_NAME, "version": __version__}

    app.include_router(tables.router)

    return app


app = create_availability_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "seating.availability_main:app",
        host=settings.host,
        port=settings.availability_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
