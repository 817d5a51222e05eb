"""
api/main.py -- FastAPI application entry point for the Chop account service.

Run with:      uvicorn asgi:app --reload

Middleware (outermost to innermost):
  1. log_requests     -- method, path, status, latency for every request
  2. attach_identity  -- verifies the session token, sets request.state.identity

Lifespan builds the long-lived collaborators once (store, service, cookie
policy) and disposes of the store on shutdown. Nothing in app.state changes
after startup.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.v1.auth import router as auth_router
from auth.dependencies import attach_identity
from auth.errors import AuthError, InternalError
from auth.service import AccountService
from auth.store import AccountStore
from auth.transport import CookiePolicy
from core.config import get_settings

_VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

_settings = get_settings()

logging.basicConfig(
    level=_settings.log_level.upper(),
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("chop.api")


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the account store, service and cookie policy; dispose on shutdown."""
    logger.info("Chop account service starting up")
    store = AccountStore()
    app.state.account_store = store
    app.state.account_service = AccountService(
        store,
        token_validity=timedelta(seconds=_settings.token_validity_seconds),
    )
    app.state.cookie_policy = CookiePolicy.from_settings(_settings)
    logger.info(
        "Auth initialized (environment=%s, secure_cookies=%s, accounts_present=%s)",
        _settings.environment,
        app.state.cookie_policy.secure,
        store.has_accounts(),
    )

    yield

    store.close()
    logger.info("Chop account service shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Chop Accounts API",
    description="Account creation, login and sessions for customer, admin, sales, support and warehouse accounts.",
    version=_VERSION,
    lifespan=lifespan,
)

# @app.middleware wraps in reverse registration order: the last one registered
# is outermost. Identity first, so request logging sees the final status.
app.middleware("http")(attach_identity)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api/v1", tags=["Auth"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly.
# ---------------------------------------------------------------------------


def _error_response(status_code: int, code: str, message: str, detail: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail)).model_dump(),
    )


@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    """Render a service failure with its own status and client-safe message.

    InternalError causes were already logged by the service with a traceback;
    only the generic message leaves the process.
    """
    if isinstance(exc, InternalError):
        logger.error("Internal error on %s %s", request.method, request.url.path)
    return _error_response(exc.status_code, exc.code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Missing or mistyped fields, bad JSON, or an unknown account type: 400."""
    return _error_response(400, "validation_error", "Missing field in request body", str(exc.errors()))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return _error_response(exc.status_code, f"http_{exc.status_code}", str(exc.detail))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unexpected server errors. The traceback goes to the log only."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error_response(500, "internal_error", "Internal error")


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", tags=["Health"])
async def health() -> HealthResponse:
    """Return API liveness and current version."""
    return HealthResponse(version=_VERSION)
