"""Custom exceptions following RFC 9457 Problem Details for HTTP APIs."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class ProblemDetailsException(HTTPException):
    """
    Base exception class following RFC 9457 Problem Details for HTTP APIs.

    https://tools.ietf.org/rfc/rfc9457.txt
    """

    def __init__(
        self,
        status_code: int,
        title: str,
        detail: Optional[str] = None,
        type_uri: Optional[str] = None,
        instance: Optional[str] = None,
        extensions: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize Problem Details exception.

        Args:
            status_code: HTTP status code
            title: Short, human-readable summary of the problem type
            detail: Human-readable explanation specific to this occurrence
            type_uri: URI reference that identifies the problem type
            instance: URI reference that identifies the specific occurrence
            extensions: Additional problem-specific information
            headers: HTTP headers to include in response
        """
        self.status_code = status_code
        self.title = title
        self.detail = detail
        self.type_uri = type_uri or f"about:blank#{status_code}"
        self.instance = instance
        self.extensions = extensions or {}

        self.problem_details = {
            "type": self.type_uri,
            "title": self.title,
            "status": self.status_code,
        }

        if self.detail:
            self.problem_details["detail"] = self.detail

        if self.instance:
            self.problem_details["instance"] = self.instance

        self.problem_details.update(self.extensions)

        super().__init__(
            status_code=status_code,
            detail=self.problem_details,
            headers=headers
        )


class ValidationError(ProblemDetailsException):
    """Exception for request validation errors."""

    def __init__(
        self,
        detail: str = "The request data failed validation",
        violations: Optional[list[Dict[str, str]]] = None,
        instance: Optional[str] = None,
    ):
        extensions = {}
        if violations:
            extensions["violations"] = violations

        super().__init__(
            status_code=400,
            title="Validation Error",
            detail=detail,
            type_uri="https://example.com/problems/validation-error",
            instance=instance,
            extensions=extensions,
        )


class NotFoundError(ProblemDetailsException):
    """Exception for resource not found errors."""

    def __init__(
        self,
        resource_type: str = "resource",
        resource_id: Optional[str] = None,
        detail: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        if not detail:
            detail = f"The requested {resource_type}"
            if resource_id:
                detail += f" with ID '{resource_id}'"
            detail += " could not be found"

        extensions = {
            "resource_type": resource_type,
        }
        if resource_id:
            extensions["resource_id"] = resource_id

        super().__init__(
            status_code=404,
            title="Resource Not Found",
            detail=detail,
            type_uri="https://example.com/problems/resource-not-found",
            instance=instance,
            extensions=extensions,
        )


class TableNotFoundError(NotFoundError):
    """Raised when the availability store has no table with the given ID."""

    def __init__(self, table_id: str):
        super().__init__(
            resource_type="table",
            resource_id=table_id,
            detail="Table not found",
        )
        self.table_id = table_id


class UpstreamUnavailableError(ProblemDetailsException):
    """The availability store could not be reached, timed out, or failed."""

    def __init__(
        self,
        operation: str,
        cause: str,
        detail: Optional[str] = None,
        extensions: Optional[Dict[str, Any]] = None,
        title: str = "Upstream Unavailable",
        code: str = "UPSTREAM_UNAVAILABLE",
        retryable: bool = True,
    ):
        self.operation = operation
        self.cause = cause

        problem_extensions = {
            "code": code,
            "retryable": retryable,
            "operation": operation,
            "cause": cause,
        }
        problem_extensions.update(extensions or {})

        super().__init__(
            status_code=502,
            title=title,
            detail=detail or f"Availability store call '{operation}' failed: {cause}",
            type_uri="https://example.com/problems/upstream-unavailable",
            extensions=problem_extensions,
        )


class ReconciliationRequiredError(UpstreamUnavailableError):
    """
    A cancellation was applied locally but the table release was not written upstream.

    The coordinator now sees the table as free while the availability store still
    marks it unavailable. The pair stays recorded until an operator retries it.
    """

    def __init__(self, table_id: str, reservation_id: str, cause: str):
        self.table_id = table_id
        self.reservation_id = reservation_id

        super().__init__(
            operation="set_table_availability",
            cause=cause,
            detail=(
                f"Reservation {reservation_id} was cancelled but table {table_id} "
                "could not be released; it is pending reconciliation"
            ),
            extensions={
                "table_id": table_id,
                "reservation_id": reservation_id,
            },
            title="Reconciliation Required",
            code="RECONCILIATION_REQUIRED",
            retryable=False,
        )


class InternalServerError(ProblemDetailsException):
    """Exception for internal server errors."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred while processing the request",
        error_id: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        extensions = {
            "error_id": error_id or str(uuid.uuid4()),
            "timestamp": _utc_timestamp(),
        }

        super().__init__(
            status_code=500,
            title="Internal Server Error",
            detail=detail,
            type_uri="https://example.com/problems/internal-server-error",
            instance=instance,
            extensions=extensions,
        )


async def problem_details_handler(request: Request, exc: ProblemDetailsException) -> JSONResponse:
    """
    Exception handler for Problem Details exceptions.

    Args:
        request: FastAPI request object
        exc: Problem Details exception

    Returns:
        JSONResponse: Problem Details formatted response
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.problem_details,
        headers=exc.headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Convert FastAPI body/query validation failures into a 400 Problem Details response."""
    violations = [
        {
            "path": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]
    problem = ValidationError(violations=violations, instance=request.url.path)
    return await problem_details_handler(request, problem)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Generic exception handler that converts unhandled exceptions to Problem Details format.

    Args:
        request: FastAPI request object
        exc: Unhandled exception

    Returns:
        JSONResponse: Problem Details formatted response
    """
    problem = InternalServerError(instance=str(request.url))

    logger.error(
        "Unhandled exception while processing request",
        extra={
            "error_id": problem.extensions["error_id"],
            "path": request.url.path,
            "error": str(exc),
        },
        exc_info=exc,
    )

    return JSONResponse(
        status_code=500,
        content=problem.problem_details,
    )


def register_exception_handlers(app) -> None:
    """Register the Problem Details handlers on a FastAPI application."""
    app.add_exception_handler(ProblemDetailsException, problem_details_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
