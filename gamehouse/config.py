"""
Configuration Management
Environment-based configuration for the database, auth, billing and integrations
"""

from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App config
    app_name: str = "Game House Back Office"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    log_format: str = "json"
    logging_config_path: Optional[str] = None
    language: str = "en"

    # Database
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_db: str = "gamehouse"
    mongodb_timeout_ms: int = 5000

    # Auth
    jwt_secret: str = "change-me-gamehouse-jwt-secret"
    jwt_algorithm: str = "HS256"
    jwt_expire_days: int = 7
    login_session_hours: int = 24
    auth_cookie_name: str = "auth_token"
    cookie_secure: bool = False
    password_reset_minutes: int = 60
    password_min_length: int = 6
    frontend_url: str = "http://localhost:3000"

    # Billing policy for time-based services
    rate_period_minutes: int = 1
    minimum_billable_minutes: int = 1

    # Activity log
    log_retention_days_default: int = 180

    # Backups
    backup_dir: str = "./temp/backups"

    # Reports group session start times in this timezone
    report_timezone: str = "UTC"

    # SMTP
    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_username: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_use_tls: bool = False
    smtp_timeout: int = 30
    smtp_from_email: str = "noreply@gamehouse.local"
    smtp_from_name: str = "Game House"

    # Telegram bot API
    telegram_api_url: str = "https://api.telegram.org"
    telegram_timeout: float = 30.0

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("language")
    @classmethod
    def validate_language(cls, v):
        if v not in ("en", "fa"):
            raise ValueError("language must be 'en' or 'fa'")
        return v

    @field_validator("rate_period_minutes")
    @classmethod
    def validate_rate_period(cls, v):
        if v < 1:
            raise ValueError("rate_period_minutes must be at least 1")
        return v

    @field_validator("smtp_port")
    @classmethod
    def validate_smtp_port(cls, v):
        if not 1 <= v <= 65535:
            raise ValueError("SMTP port must be between 1 and 65535")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get settings instance"""
    return Settings()
