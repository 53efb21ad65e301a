"""Middleware module for the API."""

from api.middleware.auth import ApiKeyMiddleware, PUBLIC_ROUTES
from api.middleware.metrics import (
    MetricsMiddleware,
    get_metrics,
    get_metrics_content_type,
    record_outfits,
)
from api.middleware.rate_limit import RateLimitMiddleware
from api.middleware.request_context import RequestContextMiddleware

__all__ = [
    "ApiKeyMiddleware",
    "PUBLIC_ROUTES",
    "MetricsMiddleware",
    "get_metrics",
    "get_metrics_content_type",
    "record_outfits",
    "RateLimitMiddleware",
    "RequestContextMiddleware",
]
