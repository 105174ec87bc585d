"""
Pieces every demo app is assembled from: the FastAPI instance with docs at
``/docs``, middleware, error handlers and the health routes.
"""

import os
import platform
import sys
import time
from contextlib import asynccontextmanager
from http import HTTPStatus
from typing import Callable, Dict, List, Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from crudapi.config import ServerConfig
from crudapi.server.middleware import (
    INTERNAL_ERROR_MESSAGE,
    RateLimitMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from crudapi.types.common import (
    CpuUsage,
    ErrorResponse,
    HealthResponse,
    MemoryUsage,
    RootResponse,
    StatusResponse,
    utc_timestamp,
)
from crudapi.utils.logging_utils import get_service_logger

try:
    import resource
except ImportError:  # not available on Windows
    resource = None

# Locations that only say where a field came from
_LOCATION_PREFIXES = {"body", "path", "query", "header", "cookie"}

SWAGGER_UI_PARAMETERS = {
    "docExpansion": "list",
    "deepLinking": False,
    "displayRequestDuration": True,
}


def error_response(
    status_code: int, message: str, error=None, issues=None, headers=None
) -> JSONResponse:
    """Build a JSONResponse with the ErrorResponse shape."""
    if error is None:
        try:
            error = HTTPStatus(status_code).phrase
        except ValueError:
            error = "Error"
    body = ErrorResponse(error=error, message=message, issues=issues)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


def format_validation_errors(errors: List[dict]):
    """
    Turn pydantic errors into a one-line message and a field -> messages map.

    Returns:
        Tuple of (message, issues)
    """
    parts = []
    issues: Dict[str, List[str]] = {}
    for error in errors:
        loc = [str(item) for item in error.get("loc", ())]
        if len(loc) > 1 and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        field = ".".join(loc) or "body"
        msg = error.get("msg", "Invalid value")
        parts.append(f"{field}: {msg}")
        issues.setdefault(field, []).append(msg)
    return ", ".join(parts), issues


def register_exception_handlers(app: FastAPI, logger):
    """Map validation, HTTP and unexpected errors to the ErrorResponse shape."""

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        message, issues = format_validation_errors(exc.errors())
        logger.info(f"Validation error on {request.method} {request.url.path}: {message}")
        return error_response(400, message, error="Validation Error", issues=issues)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = str(exc.detail)
        if exc.status_code == 404 and exc.detail == "Not Found":
            message = f"Route {request.url.path} not found"
        return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))

    # Errors raised by the middleware itself; route errors are answered in
    # RequestLoggingMiddleware so they keep CORS and security headers
    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return error_response(500, INTERNAL_ERROR_MESSAGE)


def _memory_usage() -> MemoryUsage:
    # Peak resident size of the process, not the current one; 0 where unknown
    used = 0
    if resource is not None:
        used = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
        # Bytes on macOS, kilobytes elsewhere
        if sys.platform != "darwin":
            used *= 1024
    try:
        total = os.sysconf("SC_PAGE_SIZE") * os.sysconf("SC_PHYS_PAGES")
    except (AttributeError, ValueError, OSError):
        total = used
    percentage = round(used / total * 100, 2) if total else 0.0
    return MemoryUsage(used=used, total=total, percentage=percentage)


def build_health_router(api_name: str, endpoints: List[str]) -> APIRouter:
    """Routes for ``/``, ``/health`` and ``/status``."""
    router = APIRouter()

    @router.get("/", response_model=RootResponse, tags=["Root"], summary="API information")
    async def root(request: Request):
        config: ServerConfig = request.app.state.config
        return RootResponse(
            message="API is running!",
            api=api_name,
            version=config.version,
            docs="/docs",
            endpoints=endpoints,
        )

    @router.get("/health", response_model=HealthResponse, tags=["Health"], summary="Health check")
    async def health_check(request: Request):
        """Health check endpoint"""
        config: ServerConfig = request.app.state.config
        return HealthResponse(
            status="ok",
            timestamp=utc_timestamp(),
            uptime=time.monotonic() - request.app.state.started_at,
            environment=config.environment,
            version=config.version,
        )

    @router.get("/status", response_model=StatusResponse, tags=["Health"], summary="Detailed server status")
    async def status(request: Request):
        config: ServerConfig = request.app.state.config
        return StatusResponse(
            status="ok",
            timestamp=utc_timestamp(),
            uptime=time.monotonic() - request.app.state.started_at,
            environment=config.environment,
            version=config.version,
            memory=_memory_usage(),
            cpu=CpuUsage(usage=time.process_time()),
            python_version=platform.python_version(),
        )

    return router


def create_base_app(
    title: str,
    description: str,
    config: ServerConfig,
    service: str,
    endpoints: List[str],
    openapi_tags: Optional[List[dict]] = None,
    on_shutdown: Optional[List[Callable[[], None]]] = None,
) -> FastAPI:
    """
    Create a FastAPI app with the middleware, handlers and health routes
    shared by all demo apps.

    Args:
        title: OpenAPI title
        description: OpenAPI description
        config: Server configuration
        service: Service name used for the log directory
        endpoints: Paths advertised by ``GET /``
        openapi_tags: Extra tag descriptions for the docs
        on_shutdown: Callables run when the server stops

    Returns:
        Configured FastAPI instance
    """
    logger = get_service_logger(service, "server")
    shutdown_hooks = list(on_shutdown or [])

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"{title} running on http://{config.host}:{config.port}")
        logger.info(f"Swagger docs available at http://{config.host}:{config.port}/docs")
        yield
        logger.info("Shutting down server...")
        for hook in shutdown_hooks:
            try:
                hook()
            except Exception as e:
                logger.error(f"Error during shutdown: {e}")
        logger.info("Server closed")

    tags = [
        {"name": "Root", "description": "API information"},
        {"name": "Health", "description": "Server health monitoring"},
    ] + list(openapi_tags or [])

    app = FastAPI(
        title=title,
        description=description,
        version=config.version,
        docs_url="/docs",
        openapi_url="/docs.json",
        redoc_url=None,
        openapi_tags=tags,
        swagger_ui_parameters=SWAGGER_UI_PARAMETERS,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.logger = logger
    app.state.started_at = time.monotonic()

    # Last added runs first: CORS wraps everything, logging sits innermost
    app.add_middleware(RequestLoggingMiddleware, logger=logger)
    app.add_middleware(RateLimitMiddleware, config=config.rate_limit)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=config.cors_allow_credentials,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    register_exception_handlers(app, logger)
    app.include_router(build_health_router(title, endpoints))

    return app
