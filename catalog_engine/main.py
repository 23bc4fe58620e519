"""Catalog Engine main application module.

This module initializes the FastAPI application and configures
logging, middleware, routers and exception handlers.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from catalog_engine.api.attributes import router as attributes_router
from catalog_engine.api.categories import router as categories_router
from catalog_engine.api.health import router as health_router
from catalog_engine.api.middleware import setup_middleware
from catalog_engine.api.products import router as products_router
from catalog_engine.api.stock import router as stock_router
from catalog_engine.api.terms import router as terms_router
from catalog_engine.catalog.store import get_catalog_store
from catalog_engine.domain.exceptions import (
    DomainError,
    InternalError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from catalog_engine.infrastructure.config import settings
from catalog_engine.infrastructure.logging import configure_logging

configure_logging()

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    logger.info(
        "Starting Catalog Engine",
        version=settings.api_version,
        debug=settings.debug,
        backend=settings.catalog_backend,
    )
    get_catalog_store()

    yield

    logger.info("Shutting down Catalog Engine")


app = FastAPI(
    title="Catalog Engine",
    description="Multi-tenant product catalog with variants, attributes, categories and stock",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware (must be added before custom middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup custom middleware (request ID, API key auth, error handling)
setup_middleware(app)

# Include routers; literal /products/* paths must precede /products/{product_id}
app.include_router(health_router, tags=["Health"])
app.include_router(attributes_router)
app.include_router(terms_router)
app.include_router(categories_router)
app.include_router(stock_router)
app.include_router(products_router)


# ============================================================================
# Custom Exception Handlers
# ============================================================================


def _error_response(
    request: Request,
    status_code: int,
    error_code: str,
    message: str,
    details: list[dict] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details or [],
            "request_id": getattr(request.state, "request_id", None),
        },
    )


def _status_for(exc: DomainError) -> int:
    if isinstance(exc, UnauthorizedError):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Map catalog errors onto HTTP statuses with the standard error body."""
    status_code = _status_for(exc)
    if isinstance(exc, InternalError) or status_code >= 500:
        logger.error(
            "Catalog operation failed",
            path=request.url.path,
            method=request.method,
            error_code=exc.error_code,
            error=exc.message,
        )
        message = "An internal error occurred"
    else:
        message = exc.message

    context = {k: v for k, v in exc.details.items() if k != "field"}
    details = [
        {
            "field": exc.details.get("field"),
            "message": message,
            "context": context or None,
        }
    ]
    return _error_response(request, status_code, exc.error_code, message, details)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return malformed request bodies and parameters as 400."""
    details = [
        {
            "field": ".".join(str(part) for part in error["loc"][1:]) or None,
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    logger.warning(
        "Request validation failed",
        path=request.url.path,
        method=request.method,
        error_count=len(details),
    )
    return _error_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        "VALIDATION_ERROR",
        "Request validation failed",
        details,
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions with consistent format."""
    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
        details = detail.get("details", [])
    else:
        error_code = "NOT_FOUND" if exc.status_code == 404 else "ERROR"
        message = str(detail)
        details = []
    return _error_response(request, exc.status_code, error_code, message, details)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle uncaught exceptions with consistent format."""
    logger.exception(
        "Unhandled exception in handler",
        path=request.url.path,
        method=request.method,
        error=str(exc),
    )
    return _error_response(
        request,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "INTERNAL_ERROR",
        "An internal error occurred",
    )
