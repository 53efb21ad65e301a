"""Per-client request rate limiting.

Clients are keyed by ``x-user-id`` when present, otherwise by remote
address. Exhausted clients get the 429 envelope with a Retry-After header.
"""

import math

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from api.error_handlers import exception_response
from api.exceptions import RateLimitError
from api.middleware.auth import PUBLIC_ROUTES
from wardrobe.resilience import RateLimiter


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Token bucket per client in front of the API routes."""

    def __init__(self, app: ASGIApp, limiter: RateLimiter):
        super().__init__(app)
        self.limiter = limiter

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in PUBLIC_ROUTES:
            return await call_next(request)

        key = self._client_key(request)
        if not self.limiter.try_acquire(key):
            retry_after = max(1, math.ceil(self.limiter.retry_after(key)))
            return exception_response(
                request,
                RateLimitError(
                    "Too many requests",
                    details={"retryAfterSeconds": retry_after},
                ),
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)

    @staticmethod
    def _client_key(request: Request) -> str:
        user_id = request.headers.get("x-user-id", "").strip()
        if user_id:
            return f"user:{user_id}"
        host = request.client.host if request.client else "unknown"
        return f"ip:{host}"
