"""
Snippet Manager Backend — FastAPI Application Factory
=======================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn snippet_manager.main:app) or server.main().
When:  Once at server startup; the returned app handles all requests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────┐ ┌─────────────────────┐  │
    │  │  Req ID  │→│ Logging  │→│  CORS               │  │
    │  └──────────┘ └──────────┘ └─────────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────────────────────┐ ┌──────────────┐  │
    │  │ GET/POST/PUT/DELETE {prefix} │ │ GET /health  │  │
    │  └──────────────────────────────┘ └──────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Decode/Validation/Id→400 │ NotFound→404 │     │   │
    │  │ Store→500                                    │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle (app.state.lifecycle):
    STARTING       configure logging, validate settings, connect MongoDB
    SERVING        requests are handled
    SHUTTING_DOWN  interrupt received; in-flight requests drain (server.py)
    STOPPED        MongoDB connection released
"""

import enum
import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from snippet_manager import __version__
from snippet_manager.config import settings
from snippet_manager.exceptions import (
    DecodeError,
    DisconnectError,
    InvalidIdentifierError,
    NotFoundError,
    SnippetManagerError,
    StoreError,
    ValidationError,
)
from snippet_manager.middleware.logging import RequestLoggingMiddleware
from snippet_manager.middleware.request_id import RequestIDMiddleware, request_id_var
from snippet_manager.routes import health, snippets
from snippet_manager.storage import MongoStorage

logger = logging.getLogger(__name__)


class LifecycleState(str, enum.Enum):
    STARTING = "starting"
    SERVING = "serving"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)


def build_storage() -> MongoStorage:
    return MongoStorage(
        uri=settings.mongodb_uri,
        database_name=settings.mongodb_database,
        collection_name=settings.mongodb_collection,
        timeout_ms=settings.mongodb_timeout_ms,
    )


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:
        1. Setup logging
        2. Validate settings — a missing MONGODB_URI aborts startup
        3. Connect to MongoDB — a failed connection aborts startup
    Shutdown:
        1. Release the MongoDB client
    Any exception raised before `yield` makes uvicorn exit non-zero.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    app.state.lifecycle = LifecycleState.STARTING
    logger.info("Snippet Manager %s starting up...", __version__)

    storage: Optional[MongoStorage] = getattr(app.state, "storage", None)
    if storage is None:
        settings.validate_required()
        storage = build_storage()
    await storage.connect()
    app.state.storage = storage

    app.state.lifecycle = LifecycleState.SERVING
    logger.info(
        "Serving snippets under %s on %s:%d",
        settings.api_prefix or "/",
        settings.backend_host,
        settings.backend_port,
    )

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    app.state.lifecycle = LifecycleState.SHUTTING_DOWN
    try:
        await storage.disconnect()
    except DisconnectError as e:
        logger.error("Shutdown: %s", e.message)
    app.state.lifecycle = LifecycleState.STOPPED
    logger.info("Server gracefully stopped")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

_HTTP_ERROR_CODES = {404: "not_found", 405: "method_not_allowed"}


def _error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[dict] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    request_id = request_id_var.get("")
    content = {
        "error": error,
        "message": message,
        "request_id": request_id,
    }
    if details:
        content["details"] = details
    # The Exception handler runs outside RequestIDMiddleware, so set the header here too
    headers = dict(headers or {})
    if request_id:
        headers["X-Request-ID"] = request_id
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and a consistent JSON body.

    Handler hierarchy:
        RequestValidationError / DecodeError → 400 (malformed body)
        ValidationError                      → 400 (name and code both empty)
        InvalidIdentifierError               → 400
        NotFoundError                        → 404
        StoreError                           → 500 (raw driver text in details.reason)
        HTTPException (no route / method)    → 404 / 405
        SnippetManagerError (base)           → 500
        Exception (fallback)                 → 500, stack trace logged only
    """

    @app.exception_handler(DecodeError)
    async def handle_decode_error(request: Request, exc: DecodeError):
        logger.warning("[%s] Malformed request body: %s", request_id_var.get(""), exc.context)
        return _error_response(400, "decode_error", exc.message, exc.context or None)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        # FastAPI rejects bodies before the handler runs; report them as decode errors
        errors = [
            {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        return await handle_decode_error(request, DecodeError(context={"errors": errors}))

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, "validation_error", exc.message, exc.context or None)

    @app.exception_handler(InvalidIdentifierError)
    async def handle_invalid_identifier(request: Request, exc: InvalidIdentifierError):
        return _error_response(400, "invalid_identifier", exc.message, exc.context or None)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message)

    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError):
        logger.error(
            "[%s] Store error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context
        )
        return _error_response(500, "store_error", exc.message, {"reason": exc.reason or ""})

    @app.exception_handler(SnippetManagerError)
    async def handle_app_error(request: Request, exc: SnippetManagerError):
        logger.error("[%s] %s: %s", request_id_var.get(""), type(exc).__name__, exc.message)
        return _error_response(500, "server_error", exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        # Unmatched paths and methods raised by the router itself
        error = _HTTP_ERROR_CODES.get(exc.status_code, "http_error")
        return _error_response(exc.status_code, error, str(exc.detail), headers=exc.headers)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True
        )
        return _error_response(
            500, "internal_server_error", "An unexpected error occurred. Please try again."
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(storage: Optional[MongoStorage] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        storage: Pre-built storage adapter. When omitted, the lifespan
                 builds one from settings (and requires MONGODB_URI).

    Returns: Fully configured FastAPI instance.
    """
    app = FastAPI(
        title="Snippet Manager API",
        description="Create, read, update and delete code snippets stored in MongoDB.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.storage = storage
    app.state.lifecycle = LifecycleState.STARTING

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added = first to execute: RequestID → Logging → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(snippets.router)

    return app


# uvicorn expects `snippet_manager.main:app` to be importable
app = create_app()
