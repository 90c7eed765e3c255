# File: accounts_api/core/config.py

import os
from functools import lru_cache
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    # Basic app info
    app_name: str = "Urban Eats Accounts API"

    PROJECT_NAME: str = "Urban Eats Accounts API"
    VERSION: str = "0.1.0"

    api_v1_prefix: str = "/api/v1"
    debug: bool = _env_bool("DEBUG", False)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS
    backend_cors_origins: List[str] = Field(
        os.getenv("BACKEND_CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173"),
        validate_default=True,
    )

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./accounts.db")

    # Tokens
    secret_key: str = os.getenv("SECRET_KEY", "CHANGE_ME_IN_PRODUCTION")
    algorithm: str = "HS256"
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24))  # 24h
    refresh_token_expire_days: int = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", 10))

    # Passwords
    bcrypt_rounds: int = int(os.getenv("BCRYPT_ROUNDS", 10))

    # Email verification (OTP)
    otp_max_age_seconds: int = int(os.getenv("OTP_MAX_AGE_SECONDS", 600))
    verified_max_age_seconds: int = int(os.getenv("VERIFIED_MAX_AGE_SECONDS", 1800))

    # Cookies
    cookie_secure: bool = _env_bool("COOKIE_SECURE", True)
    cookie_samesite: str = Field(os.getenv("COOKIE_SAMESITE", "none"), validate_default=True)

    # Outgoing mail
    smtp_host: str = os.getenv("SMTP_HOST", "localhost")
    smtp_port: int = int(os.getenv("SMTP_PORT", 587))
    smtp_username: Optional[str] = os.getenv("SMTP_USERNAME") or None
    smtp_password: Optional[str] = os.getenv("SMTP_PASSWORD") or None
    smtp_use_tls: bool = _env_bool("SMTP_USE_TLS", True)
    smtp_timeout: float = float(os.getenv("SMTP_TIMEOUT", 10))
    mail_from: str = os.getenv("MAIL_FROM", "Urban Eats <no-reply@urbaneats.local>")

    # Cloud storage (Cloudinary)
    cloudinary_cloud_name: Optional[str] = os.getenv("CLOUDINARY_CLOUD_NAME") or None
    cloudinary_api_key: Optional[str] = os.getenv("CLOUDINARY_API_KEY") or None
    cloudinary_api_secret: Optional[str] = os.getenv("CLOUDINARY_API_SECRET") or None
    cloudinary_folder: str = os.getenv("CLOUDINARY_FOLDER", "urban-eats/profile-photos")
    upload_timeout: float = float(os.getenv("UPLOAD_TIMEOUT", 30))

    # Local scratch directory for incoming uploads
    upload_dir: str = os.getenv("UPLOAD_DIR", "./public")

    @field_validator("backend_cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v):
        if isinstance(v, str):
            return [i.strip() for i in v.split(",") if i.strip()]
        if isinstance(v, list):
            return v
        return []

    @field_validator("cookie_samesite")
    @classmethod
    def check_samesite(cls, v: str) -> str:
        v = v.lower()
        if v not in {"lax", "strict", "none"}:
            raise ValueError("cookie_samesite must be one of: lax, strict, none")
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
