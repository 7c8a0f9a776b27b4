"""FastAPI routers package."""

from .metrics import router as metrics_router
from .reconciliation import router as reconciliation_router
from .reservation import router as reservation_router
from .tables import router as tables_router
from .waitlist import router as waitlist_router

__all__ = [
    "metrics_router",
    "reconciliation_router",
    "reservation_router",
    "tables_router",
    "waitlist_router",
]
