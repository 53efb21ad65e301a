"""Global exception handlers for FastAPI.

Provides consistent JSON error response format across all endpoints:

    {"error": {"code", "message", "details"?, "requestId"}}

Internal server errors (500s) are logged but not exposed to clients.
"""

import logging
import traceback
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.exceptions import OutfittedException
from wardrobe.ai import AIServiceError
from wardrobe.store import StoreError

logger = logging.getLogger(__name__)


def get_request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None)


def create_error_response(
    code: str,
    message: str,
    details: Optional[dict[str, Any]] = None,
    request_id: Optional[str] = None,
) -> dict[str, Any]:
    """Create standardized error response structure.

    Args:
        code: Machine-readable error code
        message: Human-readable error message
        details: Optional additional context
        request_id: Correlation id of the failing request

    Returns:
        Error response dictionary
    """
    error: dict[str, Any] = {
        "code": code,
        "message": message,
    }
    if details:
        error["details"] = details
    error["requestId"] = request_id
    return {"error": error}


def error_json(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: Optional[dict[str, Any]] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    """Build an error envelope response for ``request``."""
    return JSONResponse(
        status_code=status_code,
        content=create_error_response(code, message, details, get_request_id(request)),
        headers=headers,
    )


def exception_response(
    request: Request,
    exc: OutfittedException,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    """Render an OutfittedException raised or built outside a route."""
    return error_json(
        request, exc.status_code, exc.error_code, exc.message, exc.details or None, headers
    )


async def outfitted_exception_handler(
    request: Request, exc: OutfittedException
) -> JSONResponse:
    """Handle OutfittedException and subclasses."""
    logger.warning(
        "API error: %s (code=%s, status=%d, path=%s, request_id=%s)",
        exc.message,
        exc.error_code,
        exc.status_code,
        request.url.path,
        get_request_id(request),
    )
    return exception_response(request, exc)


async def ai_service_exception_handler(
    request: Request, exc: AIServiceError
) -> JSONResponse:
    """Handle completion backend failures (OPENAI_ERROR and parse errors)."""
    logger.error(
        "AI error: %s (code=%s, status=%d, path=%s, request_id=%s)",
        exc.message,
        exc.error_code,
        exc.status_code,
        request.url.path,
        get_request_id(request),
    )
    return error_json(
        request, exc.status_code, exc.error_code, exc.message, exc.details or None
    )


async def store_exception_handler(request: Request, exc: StoreError) -> JSONResponse:
    """Handle record store failures not translated by a service."""
    logger.error(
        "Store error: %s (code=%s, status=%d, path=%s, request_id=%s)",
        exc.message,
        exc.error_code,
        exc.status_code,
        request.url.path,
        get_request_id(request),
    )
    return error_json(request, exc.status_code, exc.error_code, exc.message)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors.

    Converts FastAPI's validation errors to our standard format.
    """
    errors = []
    for error in exc.errors():
        loc = ".".join(str(x) for x in error.get("loc", []))
        errors.append(
            {
                "field": loc,
                "message": error.get("msg", "Invalid value"),
                "type": error.get("type", "value_error"),
            }
        )

    logger.info(
        "Validation error: %d field errors (path=%s, request_id=%s)",
        len(errors),
        request.url.path,
        get_request_id(request),
    )

    return error_json(
        request,
        400,
        "BAD_REQUEST",
        "Request validation failed",
        {"errors": errors},
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Handle Starlette/FastAPI HTTPExceptions.

    Converts standard HTTPExceptions to our format for consistency.
    """
    status_code_map = {
        400: "BAD_REQUEST",
        401: "UNAUTHORIZED",
        403: "FORBIDDEN",
        404: "NOT_FOUND",
        405: "METHOD_NOT_ALLOWED",
        409: "CONFLICT",
        429: "RATE_LIMIT_EXCEEDED",
        500: "INTERNAL_ERROR",
    }

    error_code = status_code_map.get(exc.status_code, "ERROR")
    message = str(exc.detail) if exc.detail else "An error occurred"

    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        "HTTP error %d: %s (path=%s, request_id=%s)",
        exc.status_code,
        message,
        request.url.path,
        get_request_id(request),
    )

    return error_json(request, exc.status_code, error_code, message)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions.

    Logs the full traceback but returns a generic message to clients.
    """
    logger.error(
        "Unhandled exception: %s (status=500, path=%s, request_id=%s)\n%s",
        str(exc),
        request.url.path,
        get_request_id(request),
        traceback.format_exc(),
    )

    return error_json(request, 500, "INTERNAL_ERROR", "An unexpected error occurred")


def register_error_handlers(app: FastAPI) -> None:
    """Register all error handlers with the FastAPI app."""
    app.add_exception_handler(OutfittedException, outfitted_exception_handler)
    app.add_exception_handler(AIServiceError, ai_service_exception_handler)
    app.add_exception_handler(StoreError, store_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
