import socket
from contextlib import asynccontextmanager
from typing import Final

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .config import settings
from .domain.exceptions import DomainError
from .infrastructure.database.database import get_main_engine, init_db
from .logging_config import get_logger, setup_logging
from .logging_utils import log_system_info
from .middleware import log_requests_middleware
from .presentation.api_routes import api_router
from .presentation.error_handlers import (
    handle_domain_error,
    handle_request_validation_error,
    handle_validation_error,
    problem_response,
)
from .presentation.problem_details import ProblemDetail, ProblemDetailFactory
from .telemetry import setup_telemetry


@asynccontextmanager
async def lifespan(_app: FastAPI):
    setup_logging()
    logger = get_logger(__name__)

    init_db(get_main_engine())
    logger.info("Database initialized successfully")

    hostname = socket.gethostname()
    try:
        ip_addr = socket.gethostbyname(hostname)
    except OSError:
        ip_addr = "unknown"
    log_system_info(hostname, ip_addr, settings.debug)

    yield

    logger.info("Application shutdown completed")


app: Final = FastAPI(
    title=settings.app_name,
    version=settings.version,
    debug=settings.debug,
    lifespan=lifespan,
    description="""
**LMS Activity** - activity log and undo service of the learning platform.

Every create, update and delete on users, courses, intakes, units, groups,
events, discussions and notifications is recorded in an append-only log.
Administrators can browse the log with rendered descriptions and revert
deletions, including everything that was deleted along with the record.

## Authentication

The calling user is identified by the `X-User-Id` header and must be an
administrator.
    """.strip(),
    openapi_tags=[
        {
            "name": "logs",
            "description": "Browse, undo and purge the activity log",
        },
    ],
)

setup_telemetry(app)

app.middleware("http")(log_requests_middleware)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    """Global handler for domain-specific errors."""
    logger = get_logger(__name__)
    logger.warning(
        "Domain error occurred",
        error_type=type(exc).__name__,
        error_message=str(exc),
        path=request.url.path,
        method=request.method,
    )
    return handle_domain_error(exc, request)


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    """Global handler for validation errors."""
    logger = get_logger(__name__)
    logger.warning(
        "Validation error occurred",
        error_message=str(exc),
        path=request.url.path,
        method=request.method,
    )
    return handle_validation_error(exc, request)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Global handler for Pydantic validation errors."""
    logger = get_logger(__name__)
    logger.warning(
        "Request validation error occurred",
        errors=exc.errors(),
        path=request.url.path,
        method=request.method,
    )

    return handle_request_validation_error(exc, request)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    """Global handler for database errors."""
    logger = get_logger(__name__)
    logger.error(
        "Database error occurred",
        error_type=type(exc).__name__,
        error_message=str(exc),
        path=request.url.path,
        method=request.method,
        exc_info=True,
    )

    problem: ProblemDetail
    if isinstance(exc, IntegrityError):
        problem = ProblemDetailFactory.resource_already_exists(
            resource_type="resource",
            detail="A resource with these values already exists",
            instance=str(request.url.path),
        )
    else:
        problem = ProblemDetailFactory.internal_server_error(
            detail="A database error occurred. Please try again.",
            instance=str(request.url.path),
        )
    return problem_response(problem)


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Global handler for unexpected errors."""
    logger = get_logger(__name__)
    logger.error(
        "Unexpected error occurred",
        error_type=type(exc).__name__,
        error_message=str(exc),
        path=request.url.path,
        method=request.method,
        exc_info=True,
    )

    problem = ProblemDetailFactory.internal_server_error(
        detail="An unexpected error occurred. Please try again.",
        instance=str(request.url.path),
    )
    return problem_response(problem)


app.include_router(api_router)
