"""
Bookstore Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn bookstore.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                    FastAPI App                       │
    │                                                      │
    │  Middleware Chain:                                   │
    │  ┌──────────┐ ┌──────────┐ ┌───────┐ ┌──────┐        │
    │  │ Req ID   │→│ Logging  │→│ GZip  │→│ CORS │        │
    │  └──────────┘ └──────────┘ └───────┘ └──────┘        │
    │                                                      │
    │  Routes:                                             │
    │  /auth  /genre  /books  /transactions  /health-check │
    │                                                      │
    │  Exception Handlers:                                 │
    │  BookstoreError → exc.status_code                    │
    │  RequestValidationError → 400                        │
    │  Exception → 500                                     │
    └──────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (logged, not fatal)
    3. Probe the database with backoff (logged, not fatal; /health-check
       keeps reporting 503 until it is reachable)

    Shutdown:
    1. Dispose database engine (close all connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from bookstore import __version__
from bookstore.config import settings
from bookstore.database import dispose_engine, wait_for_database
from bookstore.exceptions import BookstoreError
from bookstore.middleware.logging import RequestLoggingMiddleware
from bookstore.middleware.request_id import RequestIDMiddleware, request_id_var
from bookstore.routes import auth, books, genres, health, transactions

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during startup, before any other initialization.
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
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Bookstore Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    try:
        await wait_for_database()
        logger.info("Database reachable")
    except (OSError, SQLAlchemyError) as e:
        logger.error("Database unreachable after %d attempts: %s", settings.db_connect_max_attempts, str(e))

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Bookstore Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_body(message: str, kind: str) -> Dict[str, Any]:
    return {
        "success": False,
        "message": message,
        "error": kind,
        "request_id": request_id_var.get("") or None,
    }


def _validation_message(exc: RequestValidationError) -> str:
    """'<field>: <reason>' for the first failing field of a request."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    reason = first.get("msg", "invalid value")
    if location:
        return f"{'.'.join(location)}: {reason}"
    return reason


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to the failure envelope
    `{"success": false, "message", "error", "request_id"}`.

    Handler hierarchy:
        BookstoreError          → exc.status_code, error = exc.kind
        RequestValidationError  → 400 validation_error (body/query parsing)
        Exception (fallback)    → 500 internal

    5xx responses never carry internal details; those are logged with the
    request id.
    """

    @app.exception_handler(BookstoreError)
    async def handle_bookstore_error(request: Request, exc: BookstoreError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        else:
            logger.info("[%s] %s: %s", rid, exc.kind, exc.message)
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, exc.kind))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        message = _validation_message(exc)
        logger.info("[%s] Request validation failed: %s", request_id_var.get(""), message)
        return JSONResponse(status_code=400, content=error_body(message, "validation_error"))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=error_body("An unexpected error occurred. Please try again later.", "internal"),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Assemble middleware, exception handlers and routers."""
    app = FastAPI(
        title="Bookstore API",
        description=(
            "Bookstore backend: user accounts, genre and book catalog, and "
            "all-or-nothing order placement with stock tracking."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(genres.router)
    app.include_router(books.router)
    app.include_router(transactions.router)
    app.include_router(health.router)

    return app


app = create_app()
