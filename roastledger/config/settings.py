"""
Application settings with Pydantic v2 validation.

Loads configuration from environment variables with sensible defaults.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Storage configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    # "memory" is the offline/demo backend, nothing is persisted
    backend: Literal["sqlite", "memory"] = "sqlite"
    data_dir: Path = Path("data")
    db_name: str = "roastledger.db"

    # SQLite settings
    pool_size: int = 5
    busy_timeout: int = 30000  # ms

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class WarehouseSettings(BaseSettings):
    """Warehouse defaults used when a command does not name a location."""

    model_config = SettingsConfigDict(env_prefix="WAREHOUSE_")

    green_bean_location: str = "Gudang Green Bean"
    roasted_bean_location: str = "Gudang Roasted Bean"


class ValuationSettings(BaseSettings):
    """Cost and valuation configuration."""

    model_config = SettingsConfigDict(env_prefix="VALUATION_")

    currency: str = "IDR"

    # Blend percentages must sum to 100 within this tolerance
    percentage_tolerance: float = 0.01
    # Quoted vs recomputed blend cost, per kg
    cost_tolerance: float = 0.01
    # Stock balances, kg
    quantity_tolerance: float = 1e-6


class APISettings(BaseSettings):
    """API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["*"]


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Roast Ledger"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    # None picks console in development, json otherwise
    log_format: Literal["console", "json"] | None = None

    # Sub-settings
    storage: StorageSettings = Field(default_factory=StorageSettings)
    warehouse: WarehouseSettings = Field(default_factory=WarehouseSettings)
    valuation: ValuationSettings = Field(default_factory=ValuationSettings)
    api: APISettings = Field(default_factory=APISettings)

    @field_validator("storage", mode="before")
    @classmethod
    def ensure_data_dir(cls, v: Any) -> StorageSettings:
        if isinstance(v, dict):
            settings = StorageSettings(**v)
        else:
            settings = v or StorageSettings()
        if settings.backend == "sqlite":
            settings.data_dir.mkdir(parents=True, exist_ok=True)
        return settings


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
