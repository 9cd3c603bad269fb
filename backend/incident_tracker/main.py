"""
Main Application Entry Point
============================

Responsibilities:
- Build the FastAPI application (`create_app`)
- Own the database resource for the application's lifetime
- Configure middleware stack and CORS
- Register API routers
- Map the exception taxonomy to the response envelope
- Provide root descriptor and health check endpoints

Usage:
    uvicorn incident_tracker.main:app --port 5000
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, UTC
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from incident_tracker.api.incidents import router as incidents_router
from incident_tracker.core.config import Settings, get_settings
from incident_tracker.core.exceptions import IncidentTrackerException
from incident_tracker.core.logging import configure_logging, get_logger
from incident_tracker.db.session import Database
from incident_tracker.middleware.request_context import RequestContextMiddleware
from incident_tracker.schemas import ErrorEnvelope, HealthResponse

# Initialize logger
logger = get_logger(__name__)


def _error_response(
    status_code: int,
    message: str,
    errors: Optional[list] = None,
    error: Optional[str] = None,
) -> JSONResponse:
    envelope = ErrorEnvelope(message=message, errors=errors, error=error)
    return JSONResponse(
        status_code=status_code,
        content=envelope.model_dump(exclude_none=True),
    )


def _error_detail(request: Request, detail: str) -> str:
    """Internal error detail, hidden in production."""
    settings: Settings = request.app.state.settings
    if settings.is_production:
        return "Internal server error"
    return detail


# =====================================
# Application Lifespan Handler
# =====================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler for startup and shutdown events.

    Startup:
    - Configure logging
    - Connect to the database; a failure aborts startup
    - Create missing tables when DB_AUTO_CREATE is set

    Shutdown:
    - Dispose of the database connection pool
    """
    settings: Settings = app.state.settings
    configure_logging(settings)

    logger.info(
        "application_starting",
        app_name=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
    )

    database: Database = app.state.database or Database.from_settings(settings)
    app.state.database = database

    try:
        database.connect()
        if settings.DB_AUTO_CREATE:
            database.create_schema()
        yield
    except asyncio.CancelledError:
        logger.debug("application_shutdown_requested")
        raise
    finally:
        database.dispose()
        logger.info("application_shutdown_complete")


# =====================================
# Exception Handlers
# =====================================

async def incident_tracker_exception_handler(request: Request, exc: IncidentTrackerException):
    """
    Handle application exceptions.

    4xx errors carry their message and any validation messages;
    5xx errors report a generic message plus (outside production) detail.
    """
    logger.warning(
        "application_exception",
        exception_type=type(exc).__name__,
        message=exc.message,
        status_code=exc.status_code,
        path=request.url.path,
    )

    if exc.status_code >= 500:
        return _error_response(
            exc.status_code,
            "Server error",
            error=_error_detail(request, str(exc.details.get("reason", exc.message))),
        )

    return _error_response(
        exc.status_code,
        exc.message,
        errors=getattr(exc, "errors", None),
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    """Handle store failures that escaped the route."""
    logger.error(
        "database_error",
        exception_type=type(exc).__name__,
        error=str(exc),
        path=request.url.path,
        method=request.method,
    )
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Server error",
        error=_error_detail(request, str(exc)),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Framework HTTP errors, including unmatched routes."""
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        message = "Route not found"
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorEnvelope(message=message).model_dump(exclude_none=True),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Framework-level request validation errors use the same 400 envelope."""
    errors = [
        f"{'.'.join(str(loc) for loc in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    ]
    logger.warning("request_validation_error", path=request.url.path, errors=errors)
    return _error_response(status.HTTP_400_BAD_REQUEST, "Validation error", errors=errors)


async def general_exception_handler(request: Request, exc: Exception):
    """
    Handle unexpected exceptions.

    Logs the error and returns a generic error message.
    """
    logger.error(
        "unhandled_exception",
        exception_type=type(exc).__name__,
        message=str(exc),
        path=request.url.path,
        method=request.method,
        exc_info=True,
    )
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Something went wrong!",
        error=_error_detail(request, str(exc)),
    )


# =====================================
# FastAPI App Initialization
# =====================================

def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Application settings. Loaded from the environment if None.
        database: Pre-built database resource. Built from settings at
            startup if None.

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        description="Create, list, update, close and delete incident records.",
        version=settings.APP_VERSION,
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
    )
    app.state.settings = settings
    app.state.database = database

    # CORS
    origins = settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware)

    # Exception handlers
    app.add_exception_handler(IncidentTrackerException, incident_tracker_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    # Routers
    app.include_router(incidents_router)

    @app.get("/", tags=["Health"], summary="API Descriptor")
    def root() -> dict:
        return {
            "message": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "endpoints": {
                "incidents": incidents_router.prefix,
                "health": "/health",
            },
        }

    @app.get("/health", tags=["Health"], summary="Health Check", response_model=HealthResponse)
    def health_check(request: Request) -> HealthResponse:
        """Report live database connectivity."""
        database: Optional[Database] = request.app.state.database
        connected = database is not None and database.is_connected()
        return HealthResponse(
            status="OK",
            database="Connected" if connected else "Disconnected",
            timestamp=datetime.now(UTC),
        )

    return app


app = create_app()
