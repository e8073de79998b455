"""
Runtime settings read from environment variables (or `.env`).
Variable names are the upper-cased field names, e.g. `DATABASE_URL`, `PAYMENT_WEBHOOK_SECRET`.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings
from typing import List
from functools import lru_cache

ENVIRONMENTS = ("development", "testing", "staging", "production")
DEFAULT_JWT_SECRET = "your-secret-key-change-in-production"


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Application configuration
    app_name: str = "Estate Marketplace API"
    app_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False
    testing: bool = False

    # Database configuration
    database_url: str = "postgresql+asyncpg://postgres:postgres@db:5432/estate_marketplace"
    db_pool_size: int = 10
    db_max_overflow: int = 20
    db_pool_timeout: int = 30
    db_statement_timeout_ms: int = 15000

    # JWT configuration
    jwt_secret_key: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 30
    jwt_refresh_token_expire_days: int = 7

    # Payment provider webhook
    payment_webhook_secret: str = "whsec-change-in-production"
    payment_signature_header: str = "X-Payment-Signature"

    # API configuration
    api_prefix: str = "/api"
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Dashboard and listing defaults
    dashboard_feedback_limit: int = 5
    dashboard_recent_properties_limit: int = 5
    analytics_month_buckets: int = 12
    top_sellers_limit: int = 5
    max_page_size: int = 500

    # Request logging
    slow_request_threshold: float = 2.0

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 5000

    @field_validator("database_url", mode="before")
    @classmethod
    def validate_database_url(cls, v):
        """Ensure an async driver is used."""
        if v and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        if v and v.startswith("sqlite://"):
            return v.replace("sqlite://", "sqlite+aiosqlite://", 1)
        return v

    @field_validator("jwt_secret_key", mode="before")
    @classmethod
    def validate_jwt_secret_key(cls, v):
        """Short secrets are rejected unless the shipped placeholder is still in use."""
        if not v:
            raise ValueError("JWT_SECRET_KEY is required")
        if len(v) < 32 and v != DEFAULT_JWT_SECRET:
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters long")
        return v

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        if v not in ENVIRONMENTS:
            raise ValueError(f"ENVIRONMENT must be one of: {', '.join(ENVIRONMENTS)}")
        return v

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        return self.environment == "testing" or self.testing

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


@lru_cache()
def get_settings() -> Settings:
    """Settings are read once per process."""
    return Settings()


settings = get_settings()
