"""Main FastAPI application."""
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, Depends
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy import text

from inec_poll.api.v1.router import api_router
from inec_poll.api.deps import get_db
from inec_poll.core.config import settings
from inec_poll.core.cache import global_cache
from inec_poll.core.exceptions import PollServiceError, RateLimited, StoreFailure, ValidationFailed
from inec_poll.core.logging_config import setup_logging, get_logger
from inec_poll.core.rate_limit import RateLimiter
from inec_poll.core.validation import format_validation_errors
from inec_poll.middleware import LoggingMiddleware, SecurityHeadersMiddleware
from inec_poll.schemas.common import ErrorDetail, ErrorResponse

# Initialize structured logging
setup_logging(level=settings.LOG_LEVEL, json_logs=settings.ENVIRONMENT == "production")
logger = get_logger(__name__)

if settings.ENVIRONMENT == "production":
    settings.validate_production_config()

logger.info(
    "application_starting",
    app_title=settings.APP_TITLE,
    app_version=settings.APP_VERSION,
    environment=settings.ENVIRONMENT,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the rate limiter's cleanup loop for the lifetime of the app."""
    app.state.rate_limiter.start()
    try:
        yield
    finally:
        await app.state.rate_limiter.stop()


app = FastAPI(
    title=settings.APP_TITLE,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

# The limiter is owned by the app and reached by handlers through api.deps.get_rate_limiter
app.state.rate_limiter = RateLimiter(
    window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
    max_entries=settings.RATE_LIMIT_MAX_ENTRIES,
    cleanup_interval=settings.RATE_LIMIT_CLEANUP_INTERVAL,
)


def error_response(error: PollServiceError) -> JSONResponse:
    """Render a domain error as the tagged failure body."""
    detail = ErrorDetail(code=error.code, message=error.message)
    headers = {}
    if isinstance(error, ValidationFailed):
        detail.errors = error.errors
    if isinstance(error, RateLimited):
        detail.retry_after = error.retry_after
        headers["Retry-After"] = str(error.retry_after)

    return JSONResponse(
        status_code=error.status_code,
        content=ErrorResponse(error=detail).model_dump(exclude_none=True),
        headers=headers,
    )


@app.exception_handler(PollServiceError)
async def poll_service_error_handler(request: Request, exc: PollServiceError):
    if exc.status_code >= 500:
        logger.error("action_failed", code=exc.code, error=exc.message)
    else:
        logger.info("action_rejected", code=exc.code, error=exc.message)
    return error_response(exc)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return error_response(ValidationFailed(format_validation_errors(exc.errors())))


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("unhandled_store_error", error=str(exc))
    return error_response(StoreFailure(str(getattr(exc, "orig", None) or exc)))


# Add logging middleware (must be added before other middleware for proper request tracking)
app.add_middleware(LoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)


# Add API versioning middleware
@app.middleware("http")
async def add_api_version_header(request: Request, call_next):
    """Add X-API-Version header to all responses for version tracking."""
    response = await call_next(request)
    response.headers["X-API-Version"] = settings.APP_VERSION
    return response

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,  # Configured via environment
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-API-Version", "Retry-After"],
)

# Include API router
app.include_router(api_router)


@app.get("/health")
async def health_check(db: Session = Depends(get_db)):
    """
    Health check endpoint.

    Returns:
        - status: "healthy" or "unhealthy"
        - cache: Read cache statistics (size, hits, misses, hit rate)
        - rate_limiter: Number of tracked windows and capacity
        - database: Connection status

    Returns 503 if database is unreachable.
    """
    health_status = {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "cache": global_cache.get_stats(),
        "rate_limiter": app.state.rate_limiter.get_stats(),
        "database": {"status": "connected"},
    }

    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        health_status["status"] = "unhealthy"
        health_status["database"]["status"] = f"error: {str(e)}"
        logger.error("health_check_failed", error=str(e))
        raise HTTPException(status_code=503, detail=health_status)

    return health_status
