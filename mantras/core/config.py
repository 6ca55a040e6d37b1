"""Configuration management using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    mantras_log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    mantras_debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    mantras_log_dir: str | None = Field(
        default=None,
        description="Directory for rotated log files (console only when unset)",
    )

    # API server
    mantras_api_host: str = Field(
        default="127.0.0.1",
        description="Host the API server binds to",
    )
    mantras_api_port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port the API server binds to",
    )

    # Planning
    mantras_default_auto_decompose: bool = Field(
        default=True,
        description="Decompose requests into task chains unless told otherwise",
    )

    @property
    def effective_log_level(self) -> str:
        """Log level after applying debug mode."""
        return "DEBUG" if self.mantras_debug else self.mantras_log_level


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings instance loaded from environment.

    Example:
        >>> settings = get_settings()
        >>> settings.mantras_api_port
        8000
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
