import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api import auth as auth_api
from .api import candidate as candidate_api
from .config import FRONTEND_ORIGINS, LOG_LEVEL
from .database import init_db
from .utils.error_handlers import AppError, create_error_response, get_error_message

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    init_db()
    logger.info("Candidate Tracker API starting up")
    yield
    logger.info("Candidate Tracker API shutting down")


async def app_error_handler(request: Request, exc: AppError):
    """Render typed application errors with their status and code."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return create_error_response(exc.status_code, exc.message, details=exc.details, code=exc.code)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTPException (including unknown routes) in the standard envelope."""
    return create_error_response(exc.status_code, str(exc.detail))


async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Schema violations are client errors: 400 with every offending field."""
    fields = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        fields[".".join(loc) or "body"] = error.get("msg", "Invalid value")
    return create_error_response(
        400,
        get_error_message("validation_error"),
        details={"fields": fields},
        code="validation_error",
    )


async def sqlalchemy_operational_error_handler(request: Request, exc: OperationalError):
    """Handle database operational errors."""
    logger.exception("Database OperationalError: %s", exc)
    return create_error_response(503, get_error_message("database_error"), code="database_unavailable")


async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
    """Handle general database errors."""
    logger.exception("Database SQLAlchemyError: %s", exc)
    return create_error_response(500, get_error_message("database_error"), code="database_error")


async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors globally."""
    logger.exception("Unhandled exception: %s", exc)
    return create_error_response(500, get_error_message("server_error"), code="server_error")


def register_exception_handlers(application: FastAPI) -> None:
    application.add_exception_handler(AppError, app_error_handler)
    application.add_exception_handler(StarletteHTTPException, http_exception_handler)
    application.add_exception_handler(RequestValidationError, request_validation_error_handler)
    application.add_exception_handler(OperationalError, sqlalchemy_operational_error_handler)
    application.add_exception_handler(SQLAlchemyError, sqlalchemy_error_handler)
    application.add_exception_handler(Exception, global_exception_handler)


def create_app() -> FastAPI:
    setup_logging()

    application = FastAPI(title="Candidate Tracker API", version="1.0.0", lifespan=lifespan)
    application.include_router(auth_api.router)
    application.include_router(candidate_api.router)
    register_exception_handlers(application)

    @application.get("/health")
    def health_check():
        """Health check endpoint."""
        return {
            "status": "Backend running",
            "service": "Candidate Tracker API",
        }

    _default_origins = ["http://localhost:5173", "http://127.0.0.1:5173"]
    _extra_origins = [
        origin.strip()
        for origin in FRONTEND_ORIGINS.split(",")
        if origin.strip()
    ]

    application.add_middleware(
        CORSMiddleware,
        allow_origins=[*_default_origins, *_extra_origins],
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return application


app = create_app()
