"""
Service Errors

Typed errors raised by the service layer. Each type carries the HTTP status
and machine-readable code it maps to, so the HTTP boundary converts them
without inspecting messages.

Handlers registered on the FastAPI app (see ``register_exception_handlers``)
turn these, request validation failures and unexpected exceptions into the
``{"detail": {"error": ..., "message": ...}}`` shape used across the API.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base exception for service errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class NotFoundError(ServiceError):
    """Row does not exist or lies outside the caller's tenant scope."""

    def __init__(self, resource: str = "Resource", message: str | None = None):
        super().__init__(
            message=message or f"{resource} not found",
            error_code="NOT_FOUND",
            status_code=404,
        )


class PermissionDeniedError(ServiceError):
    """Caller's role is not allowed to perform the operation."""

    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(
            message=message,
            error_code="FORBIDDEN",
            status_code=403,
        )


class ConflictError(ServiceError):
    """Uniqueness violation or duplicate state."""

    def __init__(self, message: str, error_code: str = "CONFLICT"):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=409,
        )


class ScheduleConflictError(ConflictError):
    """A proposed timetable slot overlaps an existing assignment."""

    def __init__(self, message: str):
        super().__init__(message=message, error_code="SCHEDULE_CONFLICT")


class BusinessRuleError(ServiceError):
    """A domain rule rejected an otherwise well-formed request."""

    def __init__(self, message: str, error_code: str = "BUSINESS_RULE_VIOLATION"):
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=400,
        )


class DependentRecordsError(ServiceError):
    """Delete attempted while child records still reference the entity."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            error_code="HAS_DEPENDENTS",
            status_code=400,
        )


class PaymentGatewayError(ServiceError):
    """The payment processor rejected a call or could not be reached."""

    def __init__(self, message: str = "Payment gateway request failed"):
        super().__init__(
            message=message,
            error_code="PAYMENT_GATEWAY_ERROR",
            status_code=502,
        )


def _error_body(error_code: str, message: str, **extra) -> dict:
    return {"detail": {"error": error_code, "message": message, **extra}}


async def service_error_handler(_request: Request, exc: ServiceError) -> JSONResponse:
    """Convert service errors to JSON responses."""
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.error_code, exc.message),
    )


async def validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report schema validation failures as 400 with a field error list."""
    errors = [
        {
            "loc": [str(part) for part in error.get("loc", ())],
            "msg": error.get("msg", ""),
            "type": error.get("type", ""),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body("VALIDATION_ERROR", "Invalid input", errors=errors),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected failures; never leak internals to the caller."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("INTERNAL_ERROR", "An unexpected error occurred."),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the service error handlers to the application."""
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)


__all__ = [
    "ServiceError",
    "NotFoundError",
    "PermissionDeniedError",
    "ConflictError",
    "ScheduleConflictError",
    "BusinessRuleError",
    "DependentRecordsError",
    "PaymentGatewayError",
    "register_exception_handlers",
]
