"""
AI Hiring Engine - FastAPI application.

Middleware order (outermost first): CORS -> CorrelationId -> Logging.
Routers are mounted under settings.api_prefix; health probes live at the root.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Union

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

import hiring_engine.models  # noqa: F401  registers models with SQLAlchemy
from hiring_engine.core.config import settings
from hiring_engine.core.exceptions import AppException
from hiring_engine.core.limiter import limiter
from hiring_engine.core.schemas import ErrorResponse
from hiring_engine.core.logging import setup_logging
from hiring_engine.core.middleware import CorrelationIdMiddleware, LoggingMiddleware
from hiring_engine.database import SessionLocal, init_db
from hiring_engine.routers.api_router import api_router
from hiring_engine.services.storage import ensure_upload_dir

# ============================================================================
# LOGGING SETUP
# ============================================================================
setup_logging()
logger = logging.getLogger(__name__)


# ============================================================================
# LIFESPAN MANAGEMENT
# ============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.app_name} v{settings.version} ({settings.environment})")
    try:
        init_db()
        logger.info("Database initialized")
        upload_dir = ensure_upload_dir()
        logger.info(f"Upload directory ready at {upload_dir}")
    except Exception as e:
        logger.error(f"Startup failed: {e}")
        raise

    if not settings.ml.base_url:
        logger.warning("ML_SERVICE_URL is not configured")

    yield

    logger.info("Gracefully shutting down...")


app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    description="Resume parsing, job description analysis and candidate matching backed by an external ML service",
    docs_url="/docs",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# ============================================================================
# RATE LIMITER
# ============================================================================
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# ============================================================================
# MIDDLEWARE STACK (last added runs first)
# ============================================================================
app.add_middleware(LoggingMiddleware)
app.add_middleware(CorrelationIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    expose_headers=["X-Request-ID", "X-Process-Time"],
)


# ============================================================================
# EXCEPTION HANDLERS
# ============================================================================
def error_response(status_code: int, message: str, code: str, details=None) -> JSONResponse:
    content = ErrorResponse(error=message, code=code, details=details).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        # loc is usually ('body', 'field_name') or ('path', 'id')
        field = error["loc"][-1] if len(error["loc"]) > 0 else "unknown"
        errors.append({"field": str(field), "msg": error["msg"]})

    logger.warning(f"Validation Error: {errors}")
    return error_response(status.HTTP_400_BAD_REQUEST, "Invalid request", "VALIDATION_ERROR", errors)


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(f"AppException: {exc.message}", extra={"code": exc.error_code, "path": request.url.path})
    return error_response(exc.status_code, exc.message, exc.error_code, exc.details)


@app.exception_handler(StarletteHTTPException)
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: Union[HTTPException, StarletteHTTPException]):
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        return error_response(404, "Route not found", "NOT_FOUND", {"path": request.url.path})
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return error_response(exc.status_code, message, "HTTP_ERROR")


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled server error", extra={"path": request.url.path})
    return error_response(500, "Internal server error", "INTERNAL_ERROR")


# ============================================================================
# ROUTER INCLUSION
# ============================================================================
app.include_router(api_router, prefix=settings.api_prefix)


# ============================================================================
# OPERATIONAL ENDPOINTS (at root level)
# ============================================================================
@app.get("/", tags=["Health"])
def root():
    prefix = settings.api_prefix
    return {
        "message": f"{settings.app_name} API",
        "version": settings.version,
        "docs": "/docs",
        "endpoints": {
            "health": "/health",
            "auth": f"{prefix}/auth",
            "resumes": f"{prefix}/resumes",
            "parseResume": f"{prefix}/parse-resume",
            "jobDescriptions": f"{prefix}/job-descriptions",
            "parseJD": f"{prefix}/parse-jd",
            "match": f"{prefix}/match",
            "matches": f"{prefix}/matches",
            "dashboard": f"{prefix}/dashboard",
        },
    }


@app.get("/health", tags=["Health"])
def health_check():
    """Liveness probe for load balancers and orchestrators."""
    return {
        "status": "OK",
        "service": settings.app_name,
        "version": settings.version,
        "environment": settings.environment,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "cors": {
            "enabled": bool(settings.cors_origins),
            "allowedOrigins": settings.cors_origins,
        },
        "mlService": "configured" if settings.ml.base_url else "not configured",
    }


@app.get("/readiness", tags=["Health"])
def readiness_check():
    """Readiness probe - verifies database connectivity."""
    try:
        with SessionLocal() as session:
            session.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Readiness check failed: {e}")
        return error_response(503, "Service not ready", "NOT_READY", {"database": "unavailable"})
    return {"status": "ready", "components": {"database": "connected"}}
