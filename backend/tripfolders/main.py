"""
TripFolders Backend — FastAPI Application Factory
===================================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes middleware registration, route mounting, error routing,
       and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn tripfolders.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐  │
    │  │ Method Ovrd  │→│ Req ID   │→│  Logging        │  │
    │  └──────────────┘ └──────────┘ └─────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌──────────────┐ ┌─────────────┐  │
    │  │ GET /        │ │ /tripFolders │ │ GET /health │  │
    │  └──────────────┘ └──────────────┘ └─────────────┘  │
    │                                                     │
    │  Exception Handlers (all 303 + ?errorMessage=):     │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Auth→/ │ NotFound/Invalid/DB→/tripFolders    │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (warn on development defaults)
    3. Log startup complete

    Shutdown:
    1. Dispose database engine (close all connections)
    2. Log shutdown complete
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.gzip import GZipMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from tripfolders import __version__
from tripfolders.config import settings
from tripfolders.database import dispose_engine
from tripfolders.exceptions import (
    AuthError,
    DatabaseError,
    InvalidOperationError,
    NotFoundError,
    TripFoldersError,
    ValidationError,
)
from tripfolders.middleware.logging import RequestLoggingMiddleware
from tripfolders.middleware.method_override import MethodOverrideMiddleware
from tripfolders.middleware.request_id import RequestIDMiddleware, request_id_var
from tripfolders.routes import folders, health, home
from tripfolders.routes.deps import redirect_to

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s

    Called once during app startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: logging, configuration check.
    Shutdown: dispose the database engine.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("TripFolders %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: the entry page and /health still work, and every
        # token check fails closed.
        logger.error("Configuration error: %s", str(e))

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("TripFolders shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the errors routes let escape to redirects.

    Handler hierarchy:
        AuthError               → /              (sign in again)
        NotFoundError           → /tripFolders
        404 under /tripFolders/ → /tripFolders   (malformed folder id)
        InvalidOperationError   → /tripFolders   (routes usually catch these)
        ValidationError         → /tripFolders   (routes usually catch these)
        DatabaseError           → /tripFolders   (generic message)
        TripFoldersError (base) → /tripFolders
        Exception (fallback)    → /              (generic message)

    Internal details (SQL, stack traces, context dicts) are logged, never
    put into the redirect URL.
    """

    @app.exception_handler(AuthError)
    async def handle_auth_error(request: Request, exc: AuthError):
        rid = request_id_var.get("")
        logger.info("[%s] Unauthenticated request to %s: %s", rid, request.url.path, exc.message)
        return redirect_to("/", exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        logger.info("[%s] Not found: %s", rid, exc.message)
        return redirect_to(folders.LIST_URL, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        """
        A folder path whose id is not a UUID matches no route; treat it like
        an unknown folder. Every other HTTP error keeps FastAPI's response.
        """
        if exc.status_code == 404 and request.url.path.startswith(f"{folders.LIST_URL}/"):
            rid = request_id_var.get("")
            logger.info("[%s] No folder route for %s", rid, request.url.path)
            return redirect_to(folders.LIST_URL, NotFoundError(resource="trip folder").message)
        return await http_exception_handler(request, exc)

    @app.exception_handler(InvalidOperationError)
    async def handle_invalid_operation(request: Request, exc: InvalidOperationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Operation refused (%s): %s", rid, exc.reason.value, exc.context)
        return redirect_to(folders.LIST_URL, exc.message)

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return redirect_to(folders.LIST_URL, exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        """Generic message to the user, details logged server-side."""
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return redirect_to(folders.LIST_URL, GENERIC_ERROR_MESSAGE)

    @app.exception_handler(TripFoldersError)
    async def handle_app_error(request: Request, exc: TripFoldersError):
        rid = request_id_var.get("")
        logger.error("[%s] Unhandled application error: %s | Context: %s", rid, exc.message, exc.context)
        return redirect_to(folders.LIST_URL, GENERIC_ERROR_MESSAGE)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all: stack trace to the log, generic message to the user."""
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return redirect_to("/", GENERIC_ERROR_MESSAGE)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    app = FastAPI(
        title="TripFolders",
        description="Trip folders shared between travel companions.",
        version=__version__,
        docs_url="/docs",
        redoc_url=None,
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition, so the execution
    # order is: MethodOverride → RequestID → Logging → GZip

    # Pages with many members/files compress well
    app.add_middleware(GZipMiddleware, minimum_size=500)

    app.add_middleware(RequestLoggingMiddleware)

    app.add_middleware(RequestIDMiddleware)

    # Must see the request before routing does
    app.add_middleware(MethodOverrideMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(home.router)
    app.include_router(folders.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `tripfolders.main:app` to be importable
app = create_app()
