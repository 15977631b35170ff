import os
import logging
from pydantic import BaseModel, Field
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()

INSECURE_SECRET_PLACEHOLDER = "dev-only-insecure-key-DO-NOT-USE-IN-PROD"


def _env_list(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class MLServiceSettings(BaseModel):
    base_url: Optional[str] = Field(default=os.getenv("ML_SERVICE_URL") or None)
    timeout_seconds: float = float(os.getenv("ML_TIMEOUT_SECONDS", "30"))
    upload_timeout_seconds: float = float(os.getenv("ML_UPLOAD_TIMEOUT_SECONDS", "60"))
    max_attempts: int = int(os.getenv("ML_MAX_ATTEMPTS", "3"))
    retry_backoff_seconds: float = float(os.getenv("ML_RETRY_BACKOFF_SECONDS", "1.0"))


class Config(BaseModel):
    app_name: str = "AI Hiring Engine"
    version: str = "1.0.0"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"
    port: int = int(os.getenv("PORT", "5000"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./hiring_engine.db")

    # Auth
    secret_key: str = os.getenv("JWT_SECRET", INSECURE_SECRET_PLACEHOLDER)
    algorithm: str = "HS256"
    access_token_expire_minutes: int = int(os.getenv("JWT_EXPIRE_MINUTES", str(60 * 24 * 7)))
    # When false, resource routes also accept anonymous requests.
    auth_required: bool = _env_bool("AUTH_REQUIRED", "true")

    # External ML service
    ml: MLServiceSettings = MLServiceSettings()

    # "attempts": count every successful match run. "distinct": count a resume once per job.
    applicant_count_mode: str = os.getenv("APPLICANT_COUNT_MODE", "attempts")

    # CORS: localhost defaults plus CORS_ORIGINS (comma-separated) and CLIENT_URL.
    cors_origins: List[str] = Field(
        default_factory=lambda: list(dict.fromkeys(
            _env_list("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173,http://localhost:5000")
            + _env_list("CLIENT_URL", "")
        ))
    )

    # Uploads
    upload_dir: str = os.getenv("UPLOAD_DIR", "uploads")
    max_upload_mb: int = int(os.getenv("MAX_UPLOAD_MB", "10"))
    allowed_upload_extensions: List[str] = Field(
        default_factory=lambda: _env_list("ALLOWED_UPLOAD_EXTENSIONS", ".pdf,.doc,.docx,.txt")
    )

    # Rate limiting
    rate_limit_enabled: bool = _env_bool("RATE_LIMIT_ENABLED", "true")
    upload_rate_limit: str = os.getenv("UPLOAD_RATE_LIMIT", "10/minute")
    match_rate_limit: str = os.getenv("MATCH_RATE_LIMIT", "20/minute")

    # Pagination
    default_page_size: int = 50
    max_page_size: int = 200


settings = Config()

# --- Startup Validation for Production ---
_logger = logging.getLogger(__name__)
if settings.environment not in ("development", "testing"):
    if settings.secret_key == INSECURE_SECRET_PLACEHOLDER:
        raise RuntimeError(
            "FATAL: JWT_SECRET must be set for non-development environments. "
            "Set it as an environment variable."
        )
    if not settings.ml.base_url:
        _logger.warning("ML_SERVICE_URL is not set; parsing and matching requests will fail.")
elif settings.secret_key == INSECURE_SECRET_PLACEHOLDER:
    _logger.warning("⚠ Using insecure default JWT_SECRET; only acceptable in development.")
