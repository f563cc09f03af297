"""FastAPI application creation and configuration.

This module creates and configures the FastAPI application instance.
It registers exception handlers, request-id middleware, and routes.

Middleware Ordering:
- Middleware runs in reverse order of registration
- RequestIDMiddleware is added LAST so it runs FIRST (outermost), which
  gives every response an X-Request-ID, including validation errors

Outbound Client Lifecycle:
- httpx.AsyncClient is created at startup, stored in app.state
- PipelineDeps (provider router, translation, notifications) wrap the shared
  client and are used when messages are processed in-process
- Client is closed gracefully at shutdown
"""

import json
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session, sessionmaker
from starlette.exceptions import HTTPException as StarletteHTTPException

from courier.api.routes import create_api_router
from courier.config import get_settings
from courier.db.session import get_session_factory
from courier.errors import ApiError, ApiErrorCode
from courier.logging import configure_logging, get_logger
from courier.middleware.request_id import RequestIDMiddleware
from courier.responses import (
    api_error_handler,
    error_response,
    http_exception_handler,
    unhandled_exception_handler,
)
from courier.services.pipeline import build_pipeline_deps, create_http_client

# Configure structured logging at import time
configure_logging()

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle resources.

    - Creates shared httpx.AsyncClient for connection pooling
    - Builds the in-process pipeline dependencies around it
    - Closes the client on shutdown
    """
    settings = get_settings()

    app.state.httpx_client = create_http_client()
    app.state.pipeline_deps = build_pipeline_deps(
        settings,
        app.state.httpx_client,
        app.state.session_factory,
    )

    logger.info(
        "pipeline_deps_initialized",
        translation_enabled=settings.translation_enabled,
        notifications_enabled=settings.notifications_enabled,
        outbound_timeout_s=settings.outbound_timeout_s,
    )

    yield

    await app.state.httpx_client.aclose()
    logger.info("httpx_client_closed")


def create_app(session_factory: sessionmaker[Session] | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        session_factory: Optional session factory (for testing). Defaults to
            the factory bound to DATABASE_URL.

    Returns:
        Configured FastAPI application instance.
    """
    app = FastAPI(
        title="Courier API",
        description="Message enrichment pipeline and provider administration",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.session_factory = session_factory or get_session_factory()

    # Register exception handlers
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Handle request validation errors (including malformed JSON)."""
        return JSONResponse(
            status_code=400,
            content=error_response(ApiErrorCode.E_INVALID_REQUEST, "Invalid request body"),
        )

    @app.middleware("http")
    async def catch_json_decode_errors(request: Request, call_next):
        """Catch JSON decode errors before they reach route handlers."""
        if request.method in ("POST", "PUT", "PATCH"):
            content_type = request.headers.get("content-type", "")
            if "application/json" in content_type:
                body = await request.body()
                if body:
                    try:
                        json.loads(body)
                    except json.JSONDecodeError:
                        return JSONResponse(
                            status_code=400,
                            content=error_response(
                                ApiErrorCode.E_INVALID_REQUEST, "Malformed JSON body"
                            ),
                        )
        return await call_next(request)

    app.include_router(create_api_router())

    return app


def add_request_id_middleware(app: FastAPI, log_requests: bool = True) -> None:
    """Add request-id middleware to the app.

    This should be called AFTER all other middleware is added, so it runs FIRST.

    Args:
        app: The FastAPI application.
        log_requests: Whether to log access entries for each request.
    """
    app.add_middleware(RequestIDMiddleware, log_requests=log_requests)
