"""API middleware for the Catalog Engine.

Provides:
- Request ID and tenant correlation for logs
- Service API key authentication
- Error handling
"""

import secrets
import time
from typing import Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from catalog_engine.infrastructure.config import settings

logger = structlog.get_logger()


# ============================================================================
# Request Context Middleware
# ============================================================================


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Middleware to correlate logs with the request and tenant.

    Generates or extracts a request ID and adds it to:
    - Request state for access in handlers
    - Response headers for client correlation
    - Log context, together with the tenant header when present
    """

    HEADER_NAME = "X-Request-ID"

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Process request with correlation context.

        Args:
            request: Incoming request.
            call_next: Next middleware/handler.

        Returns:
            Response with request ID header.
        """
        request_id = request.headers.get(self.HEADER_NAME) or str(uuid4())
        request.state.request_id = request_id

        log_context = {"request_id": request_id}
        organization_id = request.headers.get(settings.tenant_header)
        if organization_id:
            log_context["organization_id"] = organization_id
        structlog.contextvars.bind_contextvars(**log_context)

        start_time = time.perf_counter()
        response: Response | None = None
        try:
            response = await call_next(request)
        finally:
            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code if response is not None else 500,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            structlog.contextvars.unbind_contextvars(*log_context)

        response.headers[self.HEADER_NAME] = request_id
        return response


# ============================================================================
# API Key Authentication Middleware
# ============================================================================


# Paths that don't require authentication
PUBLIC_PATHS = {
    "/health",
    "/ready",
    "/docs",
    "/redoc",
    "/openapi.json",
}


def _unauthorized(request: Request, error_code: str, message: str) -> JSONResponse:
    logger.warning(
        message,
        path=request.url.path,
        method=request.method,
    )
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={
            "error_code": error_code,
            "message": message,
            "details": [],
            "request_id": getattr(request.state, "request_id", None),
        },
        headers={"WWW-Authenticate": "Bearer"},
    )


class ApiKeyMiddleware(BaseHTTPMiddleware):
    """Middleware for service API key authentication.

    The auth gateway in front of the engine calls it with
    "Authorization: Bearer <catalog_api_key>". End-user sessions are
    resolved upstream; only the resolved tenant reaches this service.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Validate API key for protected endpoints.

        Args:
            request: Incoming request.
            call_next: Next middleware/handler.

        Returns:
            Response or 401 error.
        """
        path = request.url.path.rstrip("/") or "/"
        if path in PUBLIC_PATHS or path.startswith(("/docs", "/redoc")):
            return await call_next(request)

        auth_header = request.headers.get("Authorization")
        if not auth_header:
            return _unauthorized(request, "UNAUTHORIZED", "Missing Authorization header")

        scheme, _, api_key = auth_header.partition(" ")
        if scheme.lower() != "bearer" or not api_key:
            return _unauthorized(
                request,
                "UNAUTHORIZED",
                "Invalid Authorization header format. Use 'Bearer <api_key>'",
            )

        if not secrets.compare_digest(api_key.strip(), settings.catalog_api_key):
            return _unauthorized(request, "INVALID_API_KEY", "Invalid API key")

        request.state.authenticated = True
        return await call_next(request)


# ============================================================================
# Error Handling Middleware
# ============================================================================


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Middleware turning anything that escapes the handlers into a 500."""

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception(
                "Unhandled exception",
                path=request.url.path,
                method=request.method,
                error=str(e),
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error_code": "INTERNAL_ERROR",
                    "message": "An internal error occurred",
                    "details": [],
                    "request_id": getattr(request.state, "request_id", None),
                },
            )


# ============================================================================
# Middleware Setup
# ============================================================================


def setup_middleware(app: FastAPI) -> None:
    """Configure all middleware for the application.

    Middleware is added in reverse order (last added = first executed),
    so the request ID is bound before authentication logs anything.

    Args:
        app: FastAPI application instance.
    """
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(ApiKeyMiddleware)
    app.add_middleware(RequestIdMiddleware)
