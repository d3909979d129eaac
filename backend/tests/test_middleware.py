"""
Foods API Backend — Middleware Tests
======================================

What:  Rate limiting and request ID propagation on a minimal FastAPI app.
"""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from app.middleware.rate_limit import RateLimitMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var, resolve_request_id


def build_app(max_requests: int) -> FastAPI:
    app = FastAPI()

    @app.get("/ping")
    async def ping():
        return {"request_id": request_id_var.get("")}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware, max_requests=max_requests, window_seconds=60)
    return app


@pytest.fixture
def client_for():
    def _client(max_requests: int) -> AsyncClient:
        transport = ASGITransport(app=build_app(max_requests))
        return AsyncClient(transport=transport, base_url="http://test")
    return _client


class TestRateLimit:

    @pytest.mark.asyncio
    async def test_blocks_after_limit(self, client_for):
        async with client_for(2) as client:
            assert (await client.get("/ping")).status_code == 200
            assert (await client.get("/ping")).status_code == 200
            blocked = await client.get("/ping")

        assert blocked.status_code == 429
        body = blocked.json()
        assert body["success"] is False
        assert body["error"] == "rate_limit_exceeded"
        assert 1 <= int(blocked.headers["Retry-After"]) <= 61
        assert body["details"]["retry_after"] == int(blocked.headers["Retry-After"])

    @pytest.mark.asyncio
    async def test_health_is_never_limited(self, client_for):
        async with client_for(1) as client:
            await client.get("/ping")
            responses = [await client.get("/health") for _ in range(3)]

        assert all(r.status_code == 200 for r in responses)


class TestRequestId:

    @pytest.mark.asyncio
    async def test_generated_when_absent(self, client_for):
        async with client_for(100) as client:
            response = await client.get("/ping")

        rid = response.headers["X-Request-ID"]
        assert len(rid) == 8
        assert response.json()["request_id"] == rid

    @pytest.mark.asyncio
    async def test_client_value_reused(self, client_for):
        async with client_for(100) as client:
            response = await client.get("/ping", headers={"X-Request-ID": "trace-42"})

        assert response.headers["X-Request-ID"] == "trace-42"
        assert response.json()["request_id"] == "trace-42"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("client_value", ["a b", "<script>", "x" * 65, "id;drop"])
    async def test_unsafe_client_value_replaced(self, client_for, client_value):
        async with client_for(100) as client:
            response = await client.get("/ping", headers={"X-Request-ID": client_value})

        rid = response.headers["X-Request-ID"]
        assert rid != client_value
        assert len(rid) == 8
        assert response.json()["request_id"] == rid


class TestResolveRequestId:

    @pytest.mark.parametrize("value", ["trace-42", "3f2c9a1b", "web.checkout_7", "x" * 64])
    def test_safe_values_kept(self, value):
        assert resolve_request_id(value) == value

    @pytest.mark.parametrize("value", [None, "", "a b", "é", "x" * 65])
    def test_other_values_regenerated(self, value):
        rid = resolve_request_id(value)
        assert rid != value
        assert len(rid) == 8
        int(rid, 16)
