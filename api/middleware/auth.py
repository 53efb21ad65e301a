"""Pre-shared API key authentication middleware.

Every route except the public ones below requires an ``x-api-key`` header
equal to the configured key. Failures short-circuit with the 401 envelope
before any route or domain logic runs.
"""

import secrets
from typing import Set

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from api.error_handlers import exception_response
from api.exceptions import AuthenticationError
from wardrobe.logging import get_logger

logger = get_logger(__name__)

API_KEY_HEADER = "x-api-key"

# Routes that don't require authentication
PUBLIC_ROUTES: Set[str] = {
    "/healthz",
    "/metrics",
    "/docs",
    "/redoc",
    "/openapi.json",
}


class ApiKeyMiddleware(BaseHTTPMiddleware):
    """Reject requests whose ``x-api-key`` does not match.

    When ``require_user_id`` is set, requests must also identify the
    requester through ``x-user-id``.
    """

    def __init__(self, app: ASGIApp, api_key: str, require_user_id: bool = False):
        super().__init__(app)
        self.api_key = api_key
        self.require_user_id = require_user_id

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if self._is_public_route(request.url.path) or request.method == "OPTIONS":
            return await call_next(request)

        presented = request.headers.get(API_KEY_HEADER, "")
        if not self._key_matches(presented):
            logger.info("auth_rejected", path=request.url.path, key_present=bool(presented))
            return exception_response(request, AuthenticationError("Invalid or missing API key"))

        if self.require_user_id and not request.headers.get("x-user-id", "").strip():
            return exception_response(
                request, AuthenticationError("x-user-id header is required")
            )

        return await call_next(request)

    def _key_matches(self, presented: str) -> bool:
        # No configured key means nothing can authenticate
        if not self.api_key or not presented:
            return False
        return secrets.compare_digest(presented.encode(), self.api_key.encode())

    def _is_public_route(self, path: str) -> bool:
        return path in PUBLIC_ROUTES
