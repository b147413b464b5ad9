"""
Global settings and configuration management for the allocation backtester.

This module provides centralized configuration using Pydantic for validation
and environment variable support. Strategy parameters live in
``config/allocation.yaml`` and are validated by ``taa.core.config``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Project paths
PROJECT_ROOT = Path(__file__).parent.parent.resolve()
CONFIG_DIR = PROJECT_ROOT / "config"
LOGS_DIR = PROJECT_ROOT / "logs"
DEFAULT_ALLOCATION_CONFIG = CONFIG_DIR / "allocation.yaml"


class BacktestSettings(BaseSettings):
    """Backtesting configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="TAA_BACKTEST_",
        env_file=".env",
        extra="ignore"
    )

    # Strategy parameter file
    allocation_config: Path = DEFAULT_ALLOCATION_CONFIG

    # Analysis settings
    risk_free_rate: float = 0.0  # Annual, used by the Sharpe ratio

    # Simulation
    drift: bool = False  # Let holdings drift between rebalances

    # Sweeps
    n_jobs: int = Field(default=1, ge=1)

    @field_validator("allocation_config", mode="before")
    @classmethod
    def convert_to_path(cls, v: str | Path) -> Path:
        """Convert string paths to Path objects."""
        return Path(v) if isinstance(v, str) else v


class LoggingSettings(BaseSettings):
    """Logging configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="TAA_LOG_",
        env_file=".env",
        extra="ignore"
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: str = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"
    log_file: Path | None = LOGS_DIR / "taa.log"
    rotation: str = "10 MB"
    retention: str = "30 days"
    serialize: bool = False  # JSON logging


class Settings(BaseSettings):
    """Main settings container combining all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

    # Sub-settings
    backtest: BacktestSettings = Field(default_factory=BacktestSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    debug: bool = False  # Forces DEBUG console logging


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance."""
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment and config files."""
    global settings
    settings = Settings()
    return settings
