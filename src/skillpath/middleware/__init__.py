"""Middleware registration."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from skillpath.config import Settings
from skillpath.middleware.error_handler import setup_error_handlers
from skillpath.middleware.logging import setup_logging
from skillpath.middleware.rate_limit import RateLimitMiddleware
from skillpath.middleware.request_id import RequestIdMiddleware

# No PUT or DELETE routes exist.
ROADMAP_METHODS = ["GET", "POST", "PATCH", "OPTIONS"]


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register middleware. Starlette runs the last added outermost, so CORS goes last."""
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(
        RateLimitMiddleware,
        requests_per_window=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=ROADMAP_METHODS,
        allow_headers=["*"],
        expose_headers=["X-Request-Id", "X-RateLimit-Remaining", "X-RateLimit-Limit"],
    )
