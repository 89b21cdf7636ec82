"""Redis-backed fixed window rate limiting middleware."""

import time
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from skillpath.middleware.request_id import user_id_from_path
from skillpath.redis_client import get_redis

_EXEMPT_PATHS = frozenset({"/health", "/ready", "/version"})


def rate_limit_key(request: Request, window: int) -> str:
    """Requests addressing a user's roadmap are counted per user, everything else per client IP."""
    user_id = user_id_from_path(request.url.path)
    if user_id is not None:
        return f"ratelimit:user:{user_id}:{window}"
    client_ip = request.client.host if request.client else "unknown"
    return f"ratelimit:ip:{client_ip}:{window}"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests over the per-window limit with 429."""

    def __init__(self, app: Any, requests_per_window: int = 100, window_seconds: int = 60) -> None:  # noqa: ANN401
        super().__init__(app)
        self.requests_per_window = requests_per_window
        self.window_seconds = window_seconds

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in _EXEMPT_PATHS:
            return await call_next(request)

        window = int(time.time()) // self.window_seconds
        key = rate_limit_key(request, window)

        try:
            redis = get_redis()
        except RuntimeError:
            # Redis not initialized
            return await call_next(request)

        pipe = redis.pipeline()
        pipe.incr(key)
        pipe.expire(key, self.window_seconds + 1)
        results: list[Any] = await pipe.execute()
        current_count: int = results[0]

        if current_count > self.requests_per_window:
            return JSONResponse(
                status_code=429,
                content={"detail": "Rate limit exceeded. Try again later."},
                headers={
                    "Retry-After": str(self.window_seconds),
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Limit": str(self.requests_per_window),
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Remaining"] = str(max(0, self.requests_per_window - current_count))
        response.headers["X-RateLimit-Limit"] = str(self.requests_per_window)
        return response
