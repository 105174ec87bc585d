"""
HTTP middleware shared by the demo apps: security headers, a fixed-window
rate limiter and request logging.
"""

import time
from typing import Callable, Dict, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from crudapi.config import RateLimitConfig
from crudapi.types.common import ErrorResponse

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Permitted-Cross-Domain-Policies": "none",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
}

CONTENT_SECURITY_POLICY = (
    "default-src 'self'; base-uri 'self'; font-src 'self' https: data:; "
    "frame-ancestors 'self'; img-src 'self' data:; object-src 'none'; "
    "script-src 'self'; style-src 'self' https: 'unsafe-inline'"
)

# Swagger UI pulls its assets from a CDN
CSP_EXEMPT_PREFIXES = ("/docs",)

INTERNAL_ERROR_MESSAGE = "Something went wrong on the server"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds helmet-style security headers to every response."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        if not request.url.path.startswith(CSP_EXEMPT_PREFIXES):
            response.headers.setdefault("Content-Security-Policy", CONTENT_SECURITY_POLICY)
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Limits each client IP to ``max_requests`` per ``window_seconds``.

    Counters live in process memory and reset when the window rolls over.
    Over the limit, the request is answered with 429 and never reaches the
    route handler.
    """

    def __init__(
        self,
        app,
        config: Optional[RateLimitConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(app)
        self.config = config or RateLimitConfig()
        self.clock = clock
        # client key -> [window start, hits], kept in order of window start
        self._windows: Dict[str, list] = {}

    def _client_key(self, request: Request) -> str:
        return request.client.host if request.client else "unknown"

    def _drop_expired(self, now: float):
        expired = []
        for key, (started, _) in self._windows.items():
            if now - started < self.config.window_seconds:
                break
            expired.append(key)
        for key in expired:
            del self._windows[key]

    def _count_request(self, key: str, now: float) -> list:
        """Record one hit for ``key`` and return its ``[start, hits]`` window."""
        self._drop_expired(now)
        window = self._windows.get(key)
        if window is None:
            window = self._windows[key] = [now, 0]
        window[1] += 1
        return window

    async def dispatch(self, request: Request, call_next):
        if not self.config.enabled:
            return await call_next(request)

        now = self.clock()
        started, hits = self._count_request(self._client_key(request), now)

        remaining = max(self.config.max_requests - hits, 0)
        reset_in = int(started + self.config.window_seconds - now)

        if hits > self.config.max_requests:
            body = ErrorResponse(error="Too Many Requests", message=self.config.message)
            return JSONResponse(
                status_code=429,
                content=body.model_dump(exclude_none=True),
                headers={"Retry-After": str(reset_in)},
            )

        response = await call_next(request)
        response.headers["RateLimit-Limit"] = str(self.config.max_requests)
        response.headers["RateLimit-Remaining"] = str(remaining)
        response.headers["RateLimit-Reset"] = str(reset_in)
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs ``METHOD path -> status (ms)`` for each request.

    Errors no route handled are answered here with a generic 500, so the
    response still passes back through the security header and CORS layers.
    """

    def __init__(self, app, logger):
        super().__init__(app)
        self.logger = logger

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            self.logger.exception(f"Unhandled error on {request.method} {request.url.path}: {e}")
            body = ErrorResponse(error="Internal Server Error", message=INTERNAL_ERROR_MESSAGE)
            response = JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))

        duration_ms = (time.perf_counter() - start) * 1000
        self.logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms:.1f} ms)"
        )
        return response
