"""Clearance Portal Backend - Main FastAPI Application

Students upload the documents required for certificate collection;
administrators review, verify and reject them.

This module creates and configures the main FastAPI application, including:
- API routers (auth, clearance, admin)
- Middleware (request ID correlation, CORS)
- Exception handlers mapping domain errors to HTTP responses
- Health and observability endpoints
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError

from config import get_settings
from domain.errors import (
    AuthError,
    ClearanceError,
    ForbiddenError,
    IllegalTransitionError,
    NotFoundError,
    StorageError,
    ValidationError,
)

# Observability
from observability.logging_config import configure_logging
from observability.middleware import RequestIDMiddleware
from observability.router import router as observability_router

# Authentication
from auth.router import router as auth_router

# Clearance
from clearance.router import router as clearance_router
from clearance.admin_router import router as admin_router

settings = get_settings()

configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

logger = logging.getLogger(__name__)

_IS_PRODUCTION = settings.ENVIRONMENT == "production"

# Most specific first: ForbiddenError is an AuthError
_ERROR_STATUS = (
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (AuthError, status.HTTP_401_UNAUTHORIZED),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (IllegalTransitionError, status.HTTP_409_CONFLICT),
    (StorageError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Clearance API starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Storage backend: {settings.STORAGE_BACKEND}")

    yield

    logger.info("Clearance API shutting down...")


app = FastAPI(
    title="Clearance Portal API",
    description="Document clearance for certificate collection",
    version="0.1.0",
    docs_url=None if _IS_PRODUCTION else "/docs",
    redoc_url=None if _IS_PRODUCTION else "/redoc",
    openapi_url=None if _IS_PRODUCTION else "/openapi.json",
    lifespan=lifespan,
)


# =============================================================================
# MIDDLEWARE CONFIGURATION
# =============================================================================

# Request ID Middleware (must be first for proper correlation)
app.add_middleware(RequestIDMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.CORS_ORIGINS.split(",") if origin.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

@app.exception_handler(ClearanceError)
async def clearance_exception_handler(
    request: Request,
    exc: ClearanceError
) -> JSONResponse:
    """Translate domain errors into HTTP responses.

    Body: {"error": <code>, "message": <text>, ...} with the current status
    and attempted action for illegal transitions.
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            status_code = code
            break

    content: dict[str, Any] = {"error": exc.code, "message": exc.message}
    headers = None

    if isinstance(exc, IllegalTransitionError):
        content["current_status"] = exc.current_status
        content["action"] = exc.action
        content["doc_type"] = exc.doc_type
    elif isinstance(exc, ValidationError) and exc.max_size_bytes is not None:
        content["max_size_bytes"] = exc.max_size_bytes
    elif status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}

    if status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")

    return JSONResponse(status_code=status_code, content=content, headers=headers)


def _jsonable_errors(exc: RequestValidationError) -> list:
    """Field errors without the raw input objects (uploads are not JSON serializable)."""
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors.

    Returns a structured error response with field-level details.
    """
    logger.warning(f"Validation error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": "validation_error",
            "message": "Request validation failed",
            "details": _jsonable_errors(exc),
        },
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(
    request: Request,
    exc: SQLAlchemyError
) -> JSONResponse:
    """Handle database errors.

    Logs the full error but returns a generic message to prevent
    information leakage.
    """
    logger.error(
        f"Database error on {request.method} {request.url.path}",
        exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "database_error",
            "message": "A database error occurred. Please try again later.",
        },
    )


# =============================================================================
# ROUTER REGISTRATION
# =============================================================================

# Observability (health, ready, metrics)
app.include_router(observability_router)

app.include_router(auth_router, prefix="/api/v1")
app.include_router(clearance_router, prefix="/api/v1")
app.include_router(admin_router, prefix="/api/v1")


@app.get("/", include_in_schema=False)
async def root() -> dict[str, Any]:
    """Root endpoint - API information."""
    return {
        "name": "Clearance Portal API",
        "version": "0.1.0",
        "status": "running",
        "docs": None if _IS_PRODUCTION else "/docs",
    }


def create_app() -> FastAPI:
    """Application factory for creating test instances."""
    return app


if __name__ == "__main__":
    import os
    import uvicorn

    uvicorn.run(
        "main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=settings.ENVIRONMENT == "development",
        log_level=settings.LOG_LEVEL.lower(),
    )
