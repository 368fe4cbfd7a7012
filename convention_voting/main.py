"""Main FastAPI application."""
from fastapi import FastAPI, HTTPException, Request, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session

from convention_voting.api.v1.router import api_router
from convention_voting.api.deps import get_db
from convention_voting.core.config import settings
from convention_voting.core.exceptions import ExternalFailureError, ServiceError
from convention_voting.core.rate_limit import limiter
from convention_voting.core.logging_config import setup_logging, get_logger
from convention_voting.middleware import ActivityLoggingMiddleware, LoggingMiddleware

# Initialize structured logging
setup_logging(level=settings.LOG_LEVEL, environment=settings.ENVIRONMENT)
logger = get_logger(__name__)

if settings.ENVIRONMENT == "production":
    settings.validate_production_config()

logger.info(
    "application_starting",
    app_title=settings.APP_TITLE,
    app_version=settings.APP_VERSION,
    environment=settings.ENVIRONMENT,
)

app = FastAPI(
    title=settings.APP_TITLE,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION
)

# Add rate limiter to app state
app.state.limiter = limiter

# Add rate limit exceeded exception handler
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


def error_response(error: ServiceError) -> JSONResponse:
    return JSONResponse(
        status_code=error.status_code,
        content={"success": False, "error": error.to_dict()},
    )


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    """Render every expected service failure in one envelope."""
    if isinstance(exc, ExternalFailureError):
        logger.error("service_unavailable", error=exc.message)
    else:
        logger.info("request_rejected", code=exc.code, reason=exc.reason, error=exc.message)
    return error_response(exc)


@app.exception_handler(DBAPIError)
async def storage_error_handler(request: Request, exc: DBAPIError):
    """Storage failures outside a transaction scope (plain reads)."""
    logger.error("storage_failure", error=str(exc.orig) if exc.orig is not None else str(exc))
    return error_response(ExternalFailureError("Storage is temporarily unavailable"))


# Activity logging runs inside request logging so both see the resolved user
app.add_middleware(ActivityLoggingMiddleware)
app.add_middleware(LoggingMiddleware)


@app.middleware("http")
async def add_api_version_header(request: Request, call_next):
    """Add X-API-Version header to all responses for version tracking."""
    response = await call_next(request)
    response.headers["X-API-Version"] = settings.APP_VERSION
    return response

# CORS middleware - bearer tokens, so no credentialed cookies
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-API-Version"],
)

# Include API router
app.include_router(api_router)


@app.get("/health")
async def health_check(db: Session = Depends(get_db)):
    """
    Health check endpoint.

    Returns:
        - status: "healthy" or "unhealthy"
        - database: connection status
        - environment: current environment setting

    Returns 503 if the database is unreachable.
    """
    health_status = {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "version": settings.APP_VERSION,
        "database": {"status": "connected"},
    }

    try:
        db.execute(text("SELECT 1"))
    except DBAPIError as e:
        health_status["status"] = "unhealthy"
        health_status["database"]["status"] = "error"
        logger.error("health_check_failed", error=str(e))
        raise HTTPException(status_code=503, detail=health_status)

    return health_status
