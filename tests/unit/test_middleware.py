"""
Tests for security headers, rate limiting and CORS.
"""

from fastapi.testclient import TestClient

from crudapi.config import RateLimitConfig, ServerConfig
from crudapi.server import memory_app
from crudapi.server.middleware import RateLimitMiddleware


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def _limited_client(max_requests=2, window_seconds=60):
    config = ServerConfig(
        rate_limit=RateLimitConfig(max_requests=max_requests, window_seconds=window_seconds)
    )
    return TestClient(memory_app.create_app(config=config))


class TestSecurityHeaders:
    def test_headers_on_api_routes(self, memory_client):
        response = memory_client.get("/health")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "SAMEORIGIN"
        assert "Content-Security-Policy" in response.headers

    def test_docs_skip_content_security_policy(self, memory_client):
        response = memory_client.get("/docs")
        assert "Content-Security-Policy" not in response.headers
        assert response.headers["X-Content-Type-Options"] == "nosniff"


class TestRateLimit:
    def test_requests_over_limit_get_429(self):
        with _limited_client(max_requests=2) as client:
            assert client.get("/health").status_code == 200
            second = client.get("/health")
            assert second.headers["RateLimit-Remaining"] == "0"

            response = client.get("/health")

        assert response.status_code == 429
        assert response.json()["error"] == "Too Many Requests"
        assert "Retry-After" in response.headers

    def test_window_rolls_over(self):
        clock = FakeClock()
        app = memory_app.create_app(
            config=ServerConfig(rate_limit=RateLimitConfig(enabled=False))
        )
        app.add_middleware(
            RateLimitMiddleware,
            config=RateLimitConfig(max_requests=1, window_seconds=10),
            clock=clock,
        )

        with TestClient(app) as client:
            assert client.get("/health").status_code == 200
            assert client.get("/health").status_code == 429
            clock.now += 10
            assert client.get("/health").status_code == 200

    def test_expired_windows_are_dropped(self):
        limiter = RateLimitMiddleware(None, config=RateLimitConfig(window_seconds=10))

        for i in range(1000):
            limiter._count_request(f"10.0.{i // 256}.{i % 256}", now=i * 10.0)

        assert len(limiter._windows) == 1

    def test_live_windows_are_kept(self):
        limiter = RateLimitMiddleware(None, config=RateLimitConfig(window_seconds=10))

        limiter._count_request("10.0.0.1", now=0.0)
        limiter._count_request("10.0.0.2", now=5.0)
        assert limiter._count_request("10.0.0.1", now=9.0) == [0.0, 2]

        # 10.0.0.1 expires, 10.0.0.2 is still inside its window
        limiter._count_request("10.0.0.3", now=12.0)
        assert set(limiter._windows) == {"10.0.0.2", "10.0.0.3"}
        assert limiter._count_request("10.0.0.1", now=12.0) == [12.0, 1]

    def test_disabled_limiter_never_blocks(self, memory_client):
        for _ in range(5):
            assert memory_client.get("/health").status_code == 200


class TestCors:
    def test_allowed_origin_preflight(self, memory_client):
        response = memory_client.options(
            "/users",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "POST",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"

    def test_unknown_origin_not_echoed(self, memory_client):
        response = memory_client.get("/health", headers={"Origin": "http://evil.example.com"})
        assert "access-control-allow-origin" not in response.headers
