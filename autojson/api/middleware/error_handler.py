"""Global exception handlers for the FastAPI application.

The body-conversion chain never recovers from failures: a serializer error on
a matched result, or a result no converter supports, propagates out of the
route. These handlers are where the host pipeline turns such failures into
HTTP error responses.
"""

import traceback
from typing import Any

import orjson
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from loguru import logger
from starlette.exceptions import HTTPException

from autojson.api.schemas.errors import ErrorResponse, ServiceInfo
from autojson.api.utils.responses import ORJSONResponse
from autojson.core.config import Settings, get_settings
from autojson.core.context import RequestContext, generate_request_id
from autojson.core.exceptions import AutoJsonError, ErrorCode, Severity


def get_service_info(settings: Settings) -> ServiceInfo:
    """Create ServiceInfo from application settings."""
    return ServiceInfo(
        name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )


def _error_response(
    status_code: int,
    error_code: str,
    message: str,
    severity: str,
    details: dict[str, Any] | None = None,
    debug_info: dict[str, Any] | None = None,
) -> Response:
    settings = get_settings()
    error_response = ErrorResponse(
        error_code=error_code,
        message=message,
        details=details,
        correlation_id=RequestContext.get_correlation_id(),
        request_id=generate_request_id(),
        severity=severity,
        service_info=get_service_info(settings),
        debug_info=debug_info if settings.environment == "development" else None,
    )
    return ORJSONResponse(
        status_code=status_code,
        content=error_response.model_dump(mode="json"),
    )


async def autojson_error_handler(request: Request, exc: Exception) -> Response:
    """Handle AutoJsonError exceptions.

    Args:
        request: The FastAPI request that caused the exception
        exc: The AutoJsonError exception to handle

    Returns:
        Response: ORJSONResponse with error details

    Raises:
        TypeError: If exc is not an AutoJsonError instance
    """
    if not isinstance(exc, AutoJsonError):
        raise TypeError(f"Expected AutoJsonError, got {type(exc).__name__}")

    logger.log(
        "WARNING" if exc.is_expected else "ERROR",
        "Handling {exception_type}: {message}",
        exception_type=type(exc).__name__,
        message=exc.message,
        method=request.method,
        path=request.url.path,
        error_code=exc.error_code,
        severity=exc.severity.value,
        fingerprint=exc.fingerprint,
        alert=exc.should_alert,
    )

    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        exc.error_code,
        exc.message,
        exc.severity.value,
        details=exc.context or None,
        debug_info={
            "stack_trace": exc.stack_trace,
            "exception_type": type(exc).__name__,
        },
    )


async def serialization_error_handler(request: Request, exc: Exception) -> Response:
    """Handle a JSON serializer failure on a matched handler result.

    Args:
        request: The FastAPI request that caused the exception
        exc: The orjson.JSONEncodeError raised by the serializer

    Returns:
        Response: ORJSONResponse with a SERIALIZATION_ERROR body

    Raises:
        TypeError: If exc is not an orjson.JSONEncodeError instance
    """
    if not isinstance(exc, orjson.JSONEncodeError):
        raise TypeError(f"Expected JSONEncodeError, got {type(exc).__name__}")

    logger.error(
        "JSON serialization failed: {}",
        str(exc),
        method=request.method,
        path=request.url.path,
    )

    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorCode.SERIALIZATION_ERROR.value,
        "Response body could not be serialized to JSON",
        Severity.HIGH.value,
        debug_info={"error": str(exc), "exception_type": type(exc).__name__},
    )


async def validation_error_handler(request: Request, exc: Exception) -> Response:
    """Handle FastAPI RequestValidationError exceptions.

    Raises:
        TypeError: If exc is not a RequestValidationError instance
    """
    if not isinstance(exc, RequestValidationError):
        raise TypeError(f"Expected RequestValidationError, got {type(exc).__name__}")

    field_errors: dict[str, list[str]] = {}
    for error in exc.errors():
        field_path = error.get("loc", ())
        field_name = ".".join(str(loc) for loc in field_path[1:]) or "root"
        field_errors.setdefault(field_name, []).append(
            error.get("msg", "Invalid value")
        )

    logger.warning(
        "Request validation failed",
        method=request.method,
        path=request.url.path,
        validation_errors=field_errors,
    )

    return _error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        ErrorCode.VALIDATION_ERROR.value,
        "Request validation failed",
        Severity.LOW.value,
        details={"validation_errors": field_errors},
    )


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle Starlette HTTPException.

    Raises:
        TypeError: If exc is not an HTTPException instance
    """
    if not isinstance(exc, HTTPException):
        raise TypeError(f"Expected HTTPException, got {type(exc).__name__}")

    error_code = ErrorCode.INTERNAL_ERROR.value
    severity = Severity.MEDIUM.value
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        error_code = ErrorCode.NOT_FOUND.value
        severity = Severity.LOW.value
    elif exc.status_code < status.HTTP_500_INTERNAL_SERVER_ERROR:
        error_code = ErrorCode.VALIDATION_ERROR.value
        severity = Severity.LOW.value

    logger.warning(
        "HTTP exception",
        status=exc.status_code,
        method=request.method,
        path=request.url.path,
    )

    return _error_response(exc.status_code, error_code, str(exc.detail), severity)


async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle any other exception, custom serializer failures included.

    In production, internal error details are hidden from clients.
    """
    logger.exception(
        "Unhandled exception: {exception_type}",
        exception_type=type(exc).__name__,
        method=request.method,
        path=request.url.path,
    )

    if get_settings().environment == "production":
        message = "An internal server error occurred"
        details = None
    else:
        message = f"Internal server error: {type(exc).__name__}"
        details = {"error": str(exc), "type": type(exc).__name__}

    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorCode.INTERNAL_ERROR.value,
        message,
        Severity.CRITICAL.value,
        details=details,
        debug_info={"stack_trace": traceback.format_tb(exc.__traceback__)},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(AutoJsonError, autojson_error_handler)
    app.add_exception_handler(orjson.JSONEncodeError, serialization_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers registered")
