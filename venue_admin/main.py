"""
Venue Admin — FastAPI Application Factory
===========================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn venue_admin.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                       FastAPI App                        │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌──────────┐ ┌──────────────┐ ┌──────┐ ┌──────┐         │
    │  │ Req ID   │→│ Logging      │→│ GZip │→│ CORS │         │
    │  └──────────┘ └──────────────┘ └──────┘ └──────┘         │
    │                                                          │
    │  Routes:                                                 │
    │  roles · venues · slot times · venue expenses · health   │
    │                                                          │
    │  Exception Handlers:                                     │
    │  403 permission · 406 validation · 404 · 409 · 500       │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → configuration check → storage and report dirs
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from venue_admin import __version__
from venue_admin.config import settings
from venue_admin.database import dispose_engine
from venue_admin.exceptions import VenueAdminError
from venue_admin.middleware.logging import RequestLoggingMiddleware
from venue_admin.middleware.request_id import RequestIDMiddleware, request_id_var
from venue_admin.routes import health, roles, slot_times, venue_expenses, venues

logger = logging.getLogger(__name__)


# ── Logging Configuration ─────────────────────────────────────────────────

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("multipart").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


# ── Lifespan ──────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("Venue Admin API %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    for directory in (settings.storage_root, settings.report_dir):
        path = Path(directory)
        path.mkdir(parents=True, exist_ok=True)
        logger.info("Directory ready: %s", path.resolve())

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Venue Admin API shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ── Exception Handlers ────────────────────────────────────────────────────

def error_body(error: str, message: str, key: Optional[str] = None) -> Dict[str, Any]:
    return {
        "status": "fail",
        "error": error,
        "message": message,
        "key": key,
        "request_id": request_id_var.get(""),
    }


def _first_error(errors) -> Dict[str, Any]:
    """Message and field name of the first failing field."""
    if not errors:
        return {"message": "Validation failed", "key": None}
    first = errors[0]
    loc = [part for part in first.get("loc", ()) if isinstance(part, str) and part != "body"]
    key = loc[-1] if loc else None
    message = first.get("msg", "Validation failed")
    if key:
        message = f'"{key}" {message[:1].lower()}{message[1:]}'
    return {"message": message, "key": key}


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to the `{status: "fail", error, message, key}` body.

    Handler hierarchy:
        VenueAdminError subclasses → their own status (403/404/406/409/500)
        RequestValidationError     → 406 with the first failing field
        pydantic ValidationError   → 406 (form bodies validated in routes)
        Exception (fallback)       → 500 generic
    """

    @app.exception_handler(VenueAdminError)
    async def handle_venue_admin_error(request: Request, exc: VenueAdminError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.error_code, exc.message, exc.key),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        first = _first_error(exc.errors())
        logger.warning("[%s] Request validation failed: %s", request_id_var.get(""), first["message"])
        return JSONResponse(
            status_code=406,
            content=error_body("validation_error", first["message"], first["key"]),
        )

    @app.exception_handler(PydanticValidationError)
    async def handle_model_validation(request: Request, exc: PydanticValidationError):
        first = _first_error(exc.errors())
        logger.warning("[%s] Form validation failed: %s", request_id_var.get(""), first["message"])
        return JSONResponse(
            status_code=406,
            content=error_body("validation_error", first["message"], first["key"]),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ── Application Factory ───────────────────────────────────────────────────

def create_app() -> FastAPI:
    app = FastAPI(
        title="Venue Admin API",
        description=(
            "Administration of venues, employee roles, slot times and venue "
            "expenses for the sports-venue booking platform."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware runs in reverse registration order: request id is outermost
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Content-Disposition"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(roles.router)
    app.include_router(venues.router)
    app.include_router(slot_times.router)
    app.include_router(venue_expenses.router)
    app.include_router(health.router)

    return app


app = create_app()
