"""
MedWell Backend — FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers, the /uploads static
       mount and every router; the lifespan opens and closes the process-wide
       singletons (Mongo connector, completion provider).
Who:   uvicorn (`uvicorn medwell.main:app`) or `python -m medwell.main`.

Application Architecture:
    ┌─────────────────────────────────────────────────────────┐
    │                      FastAPI App                        │
    │                                                         │
    │  Middleware:  Request ID → Logging → GZip → CORS        │
    │                                                         │
    │  Routes:                                                │
    │    /                        /health                     │
    │    /api/user/profile        /api/reminders              │
    │    /api/symptom-checker/identify    /api/chat           │
    │    /api/prescriptions  /api/medicines  /api/vitalsigns  │
    │    /api/symptoms  /api/lifestyle/{activity,sleep}       │
    │    /api/documents           /uploads (static)           │
    │                                                         │
    │  app.state:  mongo (MongoConnector)                     │
    │              completion_service (CompletionService)     │
    │              assistant_service, document_service        │
    └─────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → config check → connect Mongo (+ indexes) → provider
    Shutdown: close provider → close Mongo client
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.staticfiles import StaticFiles

from medwell import __version__
from medwell.config import Settings, settings as default_settings
from medwell.database import MongoConnector
from medwell.exceptions import MedWellError
from medwell.middleware.logging import RequestLoggingMiddleware
from medwell.middleware.request_id import RequestIDMiddleware, request_id_var
from medwell.results import Err, ErrorKind, error_response
from medwell.routes import assistant, documents, profile, records, reminders, root
from medwell.services.assistant_service import AssistantService
from medwell.services.document_service import DocumentService
from medwell.services.file_service import FileService
from medwell.services.gemini_service import GeminiCompletionService
from medwell.services.llm_base import CompletionService
from medwell.services.record_service import RESOURCES

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(config: Settings) -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T12:00:00 [INFO] medwell.access: POST /api/chat 200 ...
    """
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries log every connection/heartbeat at DEBUG/INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    config: Settings = app.state.settings

    setup_logging(config)
    logger.info("=" * 60)
    logger.info("MedWell Backend starting up...")

    try:
        config.validate_required_for_production()
    except ValueError as e:
        # Keep serving: the affected endpoints report their own errors
        logger.warning("Configuration warning: %s", str(e))

    connector: MongoConnector = app.state.mongo
    connector.register_indexes(resource.index_spec for resource in RESOURCES)
    await connector.connect()

    if app.state.completion_service is None:
        app.state.completion_service = GeminiCompletionService(config)

    logger.info("Server ready at http://%s:%d", config.backend_host, config.port)
    logger.info("=" * 60)

    yield

    logger.info("MedWell Backend shutting down...")
    await app.state.completion_service.close()
    await connector.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions that escape the tagged-result flow onto the same error body.

    Handler hierarchy:
        RequestValidationError → 400 invalid_input (malformed body/query types)
        MedWellError           → 500 server_error (e.g. database not connected)
        Exception              → 500 server_error (anything unexpected)
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        problems = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
            problems.append(f"{location}: {error.get('msg')}" if location else error.get("msg", ""))
        message = "Invalid request: " + "; ".join(problems) if problems else "Invalid request"
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), message)
        return error_response(Err.invalid(message))

    @app.exception_handler(MedWellError)
    async def handle_medwell_error(request: Request, exc: MedWellError):
        logger.error(
            "[%s] %s: %s | Context: %s",
            request_id_var.get(""),
            type(exc).__name__,
            exc.message,
            exc.context,
        )
        return error_response(Err.from_exception("Server error", exc))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return error_response(Err(ErrorKind.SERVER_ERROR, "Server error", str(exc) or type(exc).__name__))


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    config: Optional[Settings] = None,
    connector: Optional[MongoConnector] = None,
    completion_service: Optional[CompletionService] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Settings to use (defaults to the environment-loaded singleton)
        connector: Pre-built Mongo connector (defaults to one built from config)
        completion_service: Pre-built provider (defaults to Gemini, built at startup)
    """
    config = config or default_settings

    app = FastAPI(
        title="MedWell API",
        description=(
            "Health-tracking backend: user profiles, reminders, health records, "
            "documents, and AI symptom triage and chat."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = config
    app.state.mongo = connector or MongoConnector(config)
    app.state.completion_service = completion_service
    app.state.assistant_service = AssistantService(config)
    files = FileService(storage_root=config.uploads_dir, max_file_size=config.max_file_size)
    app.state.document_service = DocumentService(files)

    # ── Middleware (last added runs first) ────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Routes ────────────────────────────────────────────────────────────
    app.include_router(root.router)
    app.include_router(profile.router)
    app.include_router(reminders.router)
    app.include_router(assistant.router)
    app.include_router(documents.router)
    for router in records.routers:
        app.include_router(router)

    # ── Static uploads ────────────────────────────────────────────────────
    app.mount("/uploads", StaticFiles(directory=str(files.storage_root)), name="uploads")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "medwell.main:app",
        host=default_settings.backend_host,
        port=default_settings.port,
    )
