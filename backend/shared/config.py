"""
Centralized configuration for the Adminboard backend.

All settings are loaded from environment variables with sensible defaults.
Module-specific settings should be namespaced (e.g., JWT_*, SUPABASE_*).
"""

import logging
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Adminboard API"
    app_version: str = "0.1.0"
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # CORS settings
    cors_origins: list[str] = ["http://localhost:5173"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Tokens
    jwt_secret: str = ""
    jwt_refresh_secret: str = ""
    jwt_algorithm: str = "HS256"
    access_token_expire_days: int = 7
    extended_token_expire_days: int = 30  # "remember me"
    refresh_token_expire_days: int = 30

    # Passwords
    bcrypt_rounds: int = 10

    # Supabase
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    users_table: str = "users"
    activities_table: str = "activities"

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in ("production", "prod")


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


def validate_security_settings(settings: Settings) -> None:
    """
    Ensure token signing secrets are present.

    Raises:
        ConfigurationError: If either signing secret is missing
    """
    if not settings.jwt_secret:
        raise ConfigurationError("JWT_SECRET is not configured", setting="jwt_secret")
    if not settings.jwt_refresh_secret:
        raise ConfigurationError(
            "JWT_REFRESH_SECRET is not configured", setting="jwt_refresh_secret"
        )


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the API process."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
