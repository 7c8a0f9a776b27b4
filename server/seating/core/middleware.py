"""Custom middleware for request tracking and logging."""

import logging
import time
import uuid
from contextvars import ContextVar
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
import structlog

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Outgoing availability store calls read this to forward the caller's request ID
request_id_ctx: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def get_request_id() -> Optional[str]:
    """Return the request ID of the request currently being handled, if any."""
    return request_id_ctx.get()


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware that adds a unique request ID to each request.

    The request ID is either extracted from the X-Request-ID header
    or generated if not present. It's added to the response headers,
    bound to structlog context, and forwarded on calls to the
    availability store so both services log the same ID.
    """

    def __init__(self, app: ASGIApp, header_name: str = REQUEST_ID_HEADER):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(self.header_name) or str(uuid.uuid4())
        request.state.request_id = request_id

        token = request_id_ctx.set(request_id)
        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")
            request_id_ctx.reset(token)

        response.headers[self.header_name] = request_id
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware that logs HTTP requests and responses.

    Logs method, path, status code and duration, at a level chosen
    from the status code.
    """

    def __init__(self, app: ASGIApp, skip_paths: Optional[list] = None):
        super().__init__(app)
        self.skip_paths = skip_paths or ["/health", "/ready", "/metrics", "/favicon.ico"]

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.skip_paths:
            return await call_next(request)

        start_time = time.perf_counter()
        log_data = {
            "request_id": getattr(request.state, "request_id", "unknown"),
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else "unknown",
        }

        logger.info("HTTP request started", extra=log_data)

        response = await call_next(request)

        log_data.update({
            "status_code": response.status_code,
            "duration_ms": round((time.perf_counter() - start_time) * 1000, 2),
        })

        if response.status_code >= 500:
            logger.error("HTTP request completed with server error", extra=log_data)
        elif response.status_code >= 400:
            logger.warning("HTTP request completed with client error", extra=log_data)
        else:
            logger.info("HTTP request completed successfully", extra=log_data)

        return response


def setup_middleware(app, enable_logging: bool = True) -> None:
    """
    Setup all middleware on the FastAPI app.

    Args:
        app: FastAPI application instance
        enable_logging: Whether to enable request logging middleware
    """
    # Last added runs first, so the request ID exists before logging reads it
    if enable_logging:
        app.add_middleware(LoggingMiddleware)

    app.add_middleware(RequestIDMiddleware)
