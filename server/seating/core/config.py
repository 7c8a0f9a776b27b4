"""Configuration settings for the seating services."""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with Pydantic validation."""

    # Environment settings
    environment: str = Field(
        default="development",
        description="Application environment"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Application log level"
    )

    # CORS settings
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:3001"],
        description="Allowed CORS origins"
    )

    # Server settings
    host: str = Field(
        default="0.0.0.0",
        description="Server host"
    )

    port: int = Field(
        default=3001,
        description="Reservation coordinator port"
    )

    availability_port: int = Field(
        default=3000,
        description="Availability store port"
    )

    # Upstream availability store
    availability_service_url: str = Field(
        default="http://localhost:3000",
        description="Base URL of the availability store"
    )

    availability_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Timeout applied to every availability store call"
    )

    # Demo data
    seed_demo_data: bool = Field(
        default=True,
        description="Load the demo tables and waitlist at startup"
    )

    # Tracing export
    otlp_endpoint: Optional[str] = Field(
        default=None,
        description="OTLP collector endpoint; export is disabled when unset"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        valid_environments = ["development", "staging", "production"]
        if v.lower() not in valid_environments:
            raise ValueError(f"Environment must be one of: {valid_environments}")
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level value."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[str]) -> list[str]:
        """Parse CORS origins from string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator("availability_service_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def debug(self) -> bool:
        """Return True if in development mode."""
        return self.environment == "development"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


# Global settings instance
settings = Settings()
