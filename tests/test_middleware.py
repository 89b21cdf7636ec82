"""Middleware tests: request ids, CORS, error rendering, rate limiting."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import AsyncClient
from starlette.requests import Request

from skillpath.middleware import rate_limit
from skillpath.middleware.rate_limit import rate_limit_key
from skillpath.middleware.request_id import user_id_from_path


def _request(path: str, host: str = "10.0.0.1") -> Request:
    return Request({"type": "http", "method": "GET", "path": path, "headers": [], "client": (host, 1234)})


def _fake_redis(count: int) -> MagicMock:
    pipe = MagicMock()
    pipe.execute = AsyncMock(return_value=[count, True])
    redis = MagicMock()
    redis.pipeline.return_value = pipe
    return redis


class TestRequestId:
    @pytest.mark.asyncio
    async def test_generated_when_missing(self, client: AsyncClient) -> None:
        response = await client.get("/health")
        assert response.headers.get("X-Request-Id")

    @pytest.mark.asyncio
    async def test_propagated_when_supplied(self, client: AsyncClient) -> None:
        response = await client.get("/health", headers={"X-Request-Id": "req-123"})
        assert response.headers["X-Request-Id"] == "req-123"


class TestCors:
    @pytest.mark.asyncio
    async def test_preflight(self, client: AsyncClient) -> None:
        response = await client.options(
            "/api/v1/users/u1/roadmap",
            headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "PATCH"},
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"

    @pytest.mark.asyncio
    async def test_preflight_rejects_unrouted_methods(self, client: AsyncClient) -> None:
        response = await client.options(
            "/api/v1/users/u1/roadmap",
            headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "DELETE"},
        )
        assert response.status_code == 400


class TestErrorHandlers:
    @pytest.mark.asyncio
    async def test_unknown_route_renders_json(self, client: AsyncClient) -> None:
        response = await client.get("/nope")
        assert response.status_code == 404
        assert response.json() == {"detail": "Not Found"}

    @pytest.mark.asyncio
    async def test_validation_error_shape(self, client: AsyncClient) -> None:
        response = await client.patch("/api/v1/users/u1/roadmap/modules/m1", json={})
        assert response.status_code == 422
        assert response.json()["detail"] == "Validation error"


class TestUserIdFromPath:
    def test_roadmap_paths(self) -> None:
        assert user_id_from_path("/api/v1/users/alice/roadmap") == "alice"
        assert user_id_from_path("/api/v1/users/alice/roadmap/modules/m1") == "alice"

    def test_other_paths(self) -> None:
        assert user_id_from_path("/health") is None
        assert user_id_from_path("/api/v1/users/") is None


class TestRateLimitKey:
    def test_user_paths_keyed_per_user(self) -> None:
        assert rate_limit_key(_request("/api/v1/users/alice/roadmap/stats"), 7) == "ratelimit:user:alice:7"

    def test_other_paths_keyed_per_ip(self) -> None:
        assert rate_limit_key(_request("/docs", host="192.168.1.5"), 7) == "ratelimit:ip:192.168.1.5:7"


class TestRateLimit:
    @pytest.mark.asyncio
    async def test_under_limit_sets_headers(self, client: AsyncClient, monkeypatch) -> None:
        monkeypatch.setattr(rate_limit, "get_redis", lambda: _fake_redis(1))
        response = await client.get("/api/v1/users/u1/roadmap/stats")
        assert response.status_code == 200
        assert response.headers["X-RateLimit-Limit"] == "100"
        assert response.headers["X-RateLimit-Remaining"] == "99"

    @pytest.mark.asyncio
    async def test_over_limit_is_429(self, client: AsyncClient, monkeypatch) -> None:
        monkeypatch.setattr(rate_limit, "get_redis", lambda: _fake_redis(101))
        response = await client.get("/api/v1/users/u1/roadmap/stats")
        assert response.status_code == 429
        assert response.headers["Retry-After"] == "60"
        assert response.json()["detail"].startswith("Rate limit exceeded")

    @pytest.mark.asyncio
    async def test_health_is_exempt(self, client: AsyncClient, monkeypatch) -> None:
        monkeypatch.setattr(rate_limit, "get_redis", lambda: _fake_redis(10_000))
        response = await client.get("/health")
        assert response.status_code == 200
