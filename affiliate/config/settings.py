"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    database_echo: bool = False
    database_pool_size: int = Field(
        default=10, ge=1, description="Base number of pooled connections"
    )
    database_max_overflow: int = Field(
        default=20, ge=0, description="Extra connections allowed beyond pool size"
    )

    # Application
    environment: str = "production"
    log_level: str = "INFO"
    log_file: str | None = Field(
        default="logs/affiliate.log",
        description="Log file path (empty disables the file sink)",
    )
    log_rotation: str = "1 day"
    log_retention: str = "7 days"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level name."""
        level = v.strip().upper()
        allowed = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}
        if level not in allowed:
            raise ValueError(
                f"Invalid log level '{v}'. Expected one of: {', '.join(sorted(allowed))}"
            )
        return level

    @field_validator("log_file")
    @classmethod
    def normalize_log_file(cls, v: str | None) -> str | None:
        """Treat an empty path as 'no file sink'."""
        if v is None or not v.strip():
            return None
        return v.strip()


settings = Settings()
