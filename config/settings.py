"""Centralized configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()

# Placeholder signing key for local development only
DEV_JWT_SECRET = "change-me-in-production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ==================== Server ====================
    host: str = "0.0.0.0"
    port: int = 5000
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000"

    # ==================== MongoDB ====================
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_database: str = "notekeep"

    # ==================== Session Tokens ====================
    jwt_secret_key: str = DEV_JWT_SECRET
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24 * 7

    # ==================== Passcodes ====================
    otp_ttl_minutes: int = 10

    # ==================== Google Sign-In ====================
    google_client_id: Optional[str] = None  # If None, /auth/google answers 503

    # ==================== SMTP (Email) ====================
    smtp_host: Optional[str] = None  # If None, print code to console
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_from_email: Optional[str] = None
    smtp_timeout: float = 10.0

    # Link used in the welcome email
    frontend_url: str = "http://localhost:3000"

    # Handle empty strings for optional string fields
    @field_validator(
        "google_client_id",
        "smtp_host",
        "smtp_user",
        "smtp_password",
        "smtp_from_email",
        mode="before",
    )
    @classmethod
    def parse_optional_str(cls, v):
        if v == "":
            return None
        return v

    @property
    def origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
