"""
TravelTales Backend: FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app(settings) builds the Database, StoryRepository, FileStore
       and StoryService, stores them on app.state, registers middleware,
       exception handlers, routers and static mounts, and returns the app.
Who:   uvicorn (uvicorn traveltales.main:app) and the test suite.

Application Architecture:
    ┌───────────────────────────────────────────────────────────┐
    │                       FastAPI App                         │
    │                                                           │
    │  Middleware:  Rate Limit → Request ID → Logging → CORS    │
    │                                                           │
    │  Routes:      /api/travel-story/...   /health             │
    │  Static:      /uploads (FileStore)    /assets (bundled)   │
    │                                                           │
    │  Exception boundary:                                      │
    │    TravelTalesError → its status_code                     │
    │    RequestValidationError → 400                           │
    │    HTTPException → its status                             │
    │    Exception → 500                                        │
    │  all rendered as {success: false, statusCode, message}    │
    └───────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, validate config, optionally create schema
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from traveltales import __version__
from traveltales.config import Settings, settings as default_settings
from traveltales.database import Database
from traveltales.exceptions import InternalError, TravelTalesError
from traveltales.middleware.logging import RequestLoggingMiddleware
from traveltales.middleware.rate_limit import RateLimitMiddleware
from traveltales.middleware.request_id import RequestIDMiddleware, request_id_var
from traveltales.repositories.story_repository import StoryRepository
from traveltales.routes import health, stories
from traveltales.schemas.travel_story import ErrorResponse
from traveltales.services.file_store import UPLOADS_URL_PATH, FileStore
from traveltales.services.story_service import StoryService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during app startup (before any other initialization).
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers that are noisy at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    config: Settings = app.state.settings
    database: Database = app.state.database

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(config.log_level)
    logger.info("TravelTales Backend starting up...")

    try:
        config.validate_required_for_production()
    except ValueError as e:
        # Logged, not fatal
        logger.error("Configuration error: %s", str(e))

    if config.auto_create_schema:
        await database.create_all()

    logger.info("Uploads directory: %s", app.state.file_store.storage_root)
    logger.info("Server ready at http://%s:%d", config.backend_host, config.backend_port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("TravelTales Backend shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(status_code=status_code, message=message).model_dump(by_alias=True),
        headers=headers,
    )


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    if location:
        return f"Invalid value for '{'.'.join(location)}': {first.get('msg', 'invalid')}"
    return first.get("msg", "Invalid request")


def register_exception_handlers(app: FastAPI) -> None:
    """
    Single error boundary: every failure leaves as
    {"success": false, "statusCode": ..., "message": ...}.

    5xx details (context, stack traces) are logged server-side only.
    """

    @app.exception_handler(TravelTalesError)
    async def handle_app_error(request: Request, exc: TravelTalesError):
        rid = request_id_var.get("")
        if isinstance(exc, InternalError):
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)

        headers = None
        retry_after = exc.context.get("retry_after")
        if retry_after:
            headers = {"Retry-After": str(retry_after)}
        return error_response(exc.status_code, exc.message, headers)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        message = _describe_validation_error(exc)
        logger.warning("[%s] Request validation error: %s", rid, message)
        return error_response(400, message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return error_response(500, "Internal Server Error")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(config: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Settings to use; defaults to the environment-derived instance.
    """
    config = config or default_settings

    app = FastAPI(
        title="TravelTales API",
        description="Personal travel journal: stories, images, favorites, search and date filters.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Collaborators ─────────────────────────────────────────────────────
    database = Database.from_settings(config)
    file_store = FileStore(config.storage_root, config.max_file_size)
    app.state.settings = config
    app.state.database = database
    app.state.file_store = file_store
    app.state.story_service = StoryService(StoryRepository(database), file_store)

    # ── Register Middleware ───────────────────────────────────────────────
    # Executes in REVERSE order of addition (last added runs first)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    if config.rate_limit_enabled:
        app.add_middleware(
            RateLimitMiddleware,
            max_requests=config.rate_limit_requests,
            window_seconds=config.rate_limit_window,
        )

    register_exception_handlers(app)

    # ── Routes and static files ───────────────────────────────────────────
    app.include_router(stories.router, prefix="/api")
    app.include_router(health.router)

    app.mount(UPLOADS_URL_PATH, StaticFiles(directory=str(file_store.storage_root)), name="uploads")
    app.mount("/assets", StaticFiles(directory=str(Path(config.assets_root))), name="assets")

    return app


# uvicorn expects `traveltales.main:app` to be importable
app = create_app()
