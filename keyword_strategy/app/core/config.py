"""
Application Configuration
=========================
Central configuration built on pydantic-settings.
Every environment variable is read through this module.
"""

from functools import lru_cache
from typing import Optional, Literal

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application Settings - Environment Variables

    Values come from the process environment or a .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # =========================================================================
    # APP CONFIG
    # =========================================================================
    app_name: str = Field(default="Keyword Strategy Service", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode flag")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level"
    )
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment"
    )

    # =========================================================================
    # API CONFIG
    # =========================================================================
    api_v1_prefix: str = Field(default="/api/v1", description="API version prefix")
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://127.0.0.1:3000"],
        description="Allowed CORS origins"
    )

    # =========================================================================
    # LLM PROVIDER (Google Gemini)
    # =========================================================================
    google_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("google_api_key", "gemini_api_key", "api_key"),
        description="Google Gemini API key (GOOGLE_API_KEY, GEMINI_API_KEY or API_KEY)"
    )
    strategy_model: str = Field(
        default="gemini-2.5-flash",
        description="Model identifier used for keyword strategy generation"
    )
    content_language: str = Field(
        default="Persian (Farsi)",
        description="Language for every free-text field the model writes"
    )

    # =========================================================================
    # VALIDATORS
    # =========================================================================

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Parse CORS origins from comma-separated string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("google_api_key", mode="before")
    @classmethod
    def blank_key_is_missing(cls, v: str | None) -> str | None:
        """Treat an empty or whitespace-only key as not configured."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def validate_llm_config(self) -> "Settings":
        """Ensure the Gemini credential is configured in production."""
        if not self.google_api_key and self.environment == "production":
            raise ValueError("GOOGLE_API_KEY must be configured in production")
        return self

    # =========================================================================
    # COMPUTED PROPERTIES
    # =========================================================================

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def llm_configured(self) -> bool:
        """Whether a provider credential is available."""
        return bool(self.google_api_key)


@lru_cache
def get_settings() -> Settings:
    """
    Singleton Settings Instance

    LRU cache ensures settings are loaded once and reused.
    Call get_settings.cache_clear() to reload if needed.

    Returns:
        Settings: Application settings instance

    Example:
        >>> from keyword_strategy.app.core.config import get_settings
        >>> settings = get_settings()
        >>> print(settings.strategy_model)
    """
    return Settings()


# Convenience alias for direct import
settings = get_settings()
