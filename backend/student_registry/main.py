"""
Student Registry Backend: FastAPI Application Factory
=======================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers, and
       attaches a lifespan that owns the store handle.
Who:   uvicorn (`uvicorn student_registry.main:app` or the `student-registry`
       console script) and the test suite.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────────┐ ┌──────────────┐  │
    │  │ Req ID   │→│  Logging        │→│  CORS        │  │
    │  └──────────┘ └─────────────────┘ └──────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌────────────────┐ ┌──────────────────┐ ┌───────┐  │
    │  │ GET/POST       │ │ GET/PUT/DELETE   │ │ GET   │  │
    │  │ /students      │ │ /student/{id}    │ │/health│  │
    │  └────────────────┘ └──────────────────┘ └───────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation→400 │ NotFound→404 │ Internal→500 │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Open the store and create the `students` table if absent
    3. Publish the Database on app.state

    Shutdown (SIGINT/SIGTERM, handled by uvicorn):
    1. Stop accepting new requests
    2. Dispose the engine (close the SQLite connections)
    3. uvicorn exits with code 0
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from student_registry import __version__
from student_registry.config import Settings, settings
from student_registry.database import Database
from student_registry.exceptions import (
    InternalError,
    NotFoundError,
    StudentRegistryError,
    ValidationError,
)
from student_registry.middleware.logging import RequestLoggingMiddleware
from student_registry.middleware.request_id import RequestIDMiddleware, request_id_var
from student_registry.routes import health, students

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during app startup, before the store is opened.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # student_registry.access already logs every request
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    if level != "DEBUG":
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
        logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Open the store before serving traffic and close it on shutdown.

    Code before `yield` runs on startup, code after it on shutdown.
    A store that cannot be opened aborts startup.
    """
    app_settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(app_settings.log_level)
    logger.info("=" * 60)
    logger.info("Student Registry starting up...")

    database = Database.from_settings(app_settings)
    try:
        await database.create_schema()
    except Exception:
        logger.error("Error connecting to the database at %s", database.url, exc_info=True)
        await database.close()
        raise
    app.state.database = database
    logger.info("Connected to the SQLite database at %s", database.url)

    logger.info(
        "Server listening at http://%s:%d",
        app_settings.backend_host,
        app_settings.backend_port,
    )
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Student Registry shutting down...")
    await database.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    """
    Request ID for an error body.

    The catch-all Exception handler runs in ServerErrorMiddleware, outside
    RequestIDMiddleware, so the ContextVar value is not guaranteed there;
    request.state shares the scope and still carries the ID.
    """
    return getattr(request.state, "request_id", None) or request_id_var.get("")


def _error_response(
    request_id: str, status_code: int, message: str, headers: Optional[dict] = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "request_id": request_id},
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        ValidationError             → 400 Bad Request
        RequestValidationError      → 400 Bad Request
        NotFoundError               → 404 Not Found
        InternalError               → 500 Internal Server Error
        StudentRegistryError (base) → 500 Internal Server Error
        StarletteHTTPException      → its own status (unknown route, bad method)
        Exception (fallback)        → 500 Internal Server Error

    Every body has the shape {"error": <message>, "request_id": <id>}.
    Store details (driver messages, SQL) go to the log only.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = _request_id(request)
        logger.warning("[%s] Validation error: %s | Context: %s", rid, exc.message, exc.context)
        return _error_response(rid, 400, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        rid = _request_id(request)
        logger.warning("[%s] Request validation error: %s", rid, exc.errors())
        return _error_response(rid, 400, "Invalid request")

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = _request_id(request)
        logger.warning("[%s] %s", rid, exc.message)
        return _error_response(rid, 404, exc.message)

    @app.exception_handler(InternalError)
    async def handle_internal_error(request: Request, exc: InternalError):
        rid = _request_id(request)
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return _error_response(rid, 500, exc.message)

    @app.exception_handler(StudentRegistryError)
    async def handle_registry_error(request: Request, exc: StudentRegistryError):
        rid = _request_id(request)
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return _error_response(rid, 500, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        rid = _request_id(request)
        logger.warning("[%s] HTTP %d: %s", rid, exc.status_code, exc.detail)
        return _error_response(rid, exc.status_code, str(exc.detail), getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = _request_id(request)
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return _error_response(rid, 500, "An unexpected error occurred.")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Settings to run with; defaults to the environment-driven
            singleton. Tests pass their own to use a temporary store.
    """
    app_settings = app_settings or settings

    app = FastAPI(
        title="Student Registry API",
        description="CRUD service over a single SQLite-backed `students` table.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = app_settings

    # ── Register Middleware ───────────────────────────────────────────────
    # Executes in reverse order of addition: RequestID → Logging → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(students.router)
    app.include_router(health.router)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve `app` with uvicorn on the configured host/port."""
    import uvicorn

    uvicorn.run(
        "student_registry.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
