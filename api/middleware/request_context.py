"""Request correlation middleware.

Reads ``x-request-id`` (or generates one), stores it on ``request.state``,
binds it into the logging context, echoes it on the response, and writes
one access log line per request.
"""

import re
import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from api.error_handlers import unhandled_exception_handler
from wardrobe.logging import bind_context, clear_context, get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "x-request-id"
USER_ID_HEADER = "x-user-id"

# Client-supplied ids are accepted only if they look like ids
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def resolve_request_id(header_value: str | None) -> str:
    if header_value and _VALID_REQUEST_ID.match(header_value):
        return header_value
    return uuid.uuid4().hex


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Attach a correlation id to every request/response pair."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        user_id = request.headers.get(USER_ID_HEADER, "").strip()
        request.state.request_id = request_id
        request.state.user_id = user_id

        clear_context()
        bind_context(request_id=request_id, user_id=user_id or None)

        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "request_failed",
                method=request.method,
                path=request.url.path,
                status=500,
                duration_ms=round((time.perf_counter() - start) * 1000, 1),
            )
            # Unhandled errors still carry the correlation header
            response = await unhandled_exception_handler(request, exc)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            "request_completed",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round((time.perf_counter() - start) * 1000, 1),
        )
        return response
