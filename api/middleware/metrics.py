"""Prometheus metrics middleware for request monitoring.

Tracks:
- request_count: Counter by method, path, status
- request_latency: Histogram by method, path
- active_requests: Gauge of currently processing requests
- ai_outfits: Counter of outfits produced by the suggestion flow
"""

import time
from typing import Callable

from fastapi import Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Match

REQUEST_COUNT = Counter(
    "outfitted_http_requests_total",
    "Total HTTP requests",
    ["method", "path", "status"],
)

REQUEST_LATENCY = Histogram(
    "outfitted_http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "path"],
    buckets=[0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

ACTIVE_REQUESTS = Gauge(
    "outfitted_http_requests_active",
    "Number of active HTTP requests",
)

AI_OUTFITS = Counter(
    "outfitted_ai_outfits_total",
    "Outfits produced by the suggestion flow",
    ["source"],
)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to collect Prometheus metrics for HTTP requests."""

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        method = request.method

        ACTIVE_REQUESTS.inc()
        start = time.perf_counter()

        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception:
            status_code = 500
            raise
        finally:
            duration = time.perf_counter() - start
            ACTIVE_REQUESTS.dec()
            # Route pattern, not the concrete path with ids
            path = self._get_path_template(request)

            if path != "/metrics":
                REQUEST_COUNT.labels(
                    method=method,
                    path=path,
                    status=str(status_code),
                ).inc()

                REQUEST_LATENCY.labels(
                    method=method,
                    path=path,
                ).observe(duration)

        return response

    def _get_path_template(self, request: Request) -> str:
        """Get the route pattern instead of actual path.

        Normalizes /api/closet/rec123 to /api/closet/{item_id} to keep
        label cardinality bounded.
        """
        route = request.scope.get("route")
        if route is not None:
            return getattr(route, "path", "unmatched")

        for route in request.app.routes:
            path = getattr(route, "path", None)
            if path is None:
                continue
            match, _ = route.matches(request.scope)
            if match == Match.FULL:
                return path

        return "unmatched"


def record_outfits(source: str, count: int) -> None:
    """Count outfits returned by a suggestion request, by 'ai' or 'stub' source."""
    if count:
        AI_OUTFITS.labels(source=source).inc(count)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    """Get the content type for Prometheus metrics."""
    return CONTENT_TYPE_LATEST
