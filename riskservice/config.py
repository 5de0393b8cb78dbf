"""
Risk Service Configuration Module
=================================

Centralized configuration management using Pydantic Settings.

Loads configuration from:
    1. Environment variables
    2. .env file (if present)
    3. Default values

Usage:
    from riskservice.config import settings

    print(settings.debounce_seconds)
    print(settings.basis_pie_url)

Author: Risk Service Team
Version: 1.0.0
"""

from functools import lru_cache
from typing import Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Naming convention: UPPER_SNAKE_CASE in env, lower_snake_case in code.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # =========================================================================
    # Application Settings
    # =========================================================================

    app_name: str = Field(default="riskservice", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # =========================================================================
    # API Server
    # =========================================================================

    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=9000, description="API server port")
    basis_pie_url: str = Field(
        default="http://localhost:9000/pies",
        description="Public base URL that risk assessments use to reference pies"
    )

    # =========================================================================
    # Pie Store
    # =========================================================================

    pie_store_backend: Literal["memory", "postgres"] = Field(
        default="memory",
        description="Pie storage backend"
    )
    postgres_host: str = Field(default="localhost", description="PostgreSQL host")
    postgres_port: int = Field(default=5432, description="PostgreSQL port")
    postgres_db: str = Field(default="riskservice", description="PostgreSQL database")
    postgres_user: str = Field(default="riskservice", description="PostgreSQL user")
    postgres_password: str = Field(
        default="riskservice_password_change_me",
        description="PostgreSQL password"
    )

    @property
    def postgres_dsn(self) -> str:
        """Get PostgreSQL connection string."""
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def pie_store_dsn(self) -> Optional[str]:
        """DSN for the pie store, or None for the in-memory backend."""
        if self.pie_store_backend == "postgres":
            return self.postgres_dsn
        return None

    # =========================================================================
    # FHIR Server
    # =========================================================================

    fhir_timeout_seconds: float = Field(
        default=30.0,
        gt=0.0,
        description="Timeout for requests to the FHIR server"
    )

    # =========================================================================
    # Recalculation Scheduling
    # =========================================================================

    debounce_seconds: float = Field(
        default=5.0,
        gt=0.0,
        description="Quiet period before a patient's recalculation runs"
    )
    shutdown_grace_seconds: float = Field(
        default=10.0,
        ge=0.0,
        description="How long shutdown waits for in-flight recalculations"
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are loaded only once.

    Returns:
        Settings instance
    """
    return Settings()


# Convenience alias
settings = get_settings()
