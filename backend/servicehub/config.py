from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """ServiceHub settings, read from ``SERVICEHUB_*`` environment variables or ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="SERVICEHUB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "ServiceHub"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"

    # Persistence
    database_url: str = "postgresql+asyncpg://servicehub:servicehub@db:5432/servicehub"
    db_pool_size: int = Field(default=5, ge=1)
    db_max_overflow: int = Field(default=10, ge=0)
    create_tables_on_startup: bool = True

    # HTTP
    cors_origins: list[str] = ["http://localhost:8081", "http://localhost:19006", "http://localhost:8000"]

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: str = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

    # Yearly allowance granted the first time an employee's balance is read
    default_annual_days: int = Field(default=15, ge=0)
    default_sick_days: int = Field(default=8, ge=0)
    default_personal_days: int = Field(default=3, ge=0)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
