"""
Configuration module for the allocation backtester.

This module provides centralized configuration management including:
- Global settings (settings.py)
- Strategy parameters (allocation.yaml)
"""

from config.settings import (
    PROJECT_ROOT,
    CONFIG_DIR,
    LOGS_DIR,
    DEFAULT_ALLOCATION_CONFIG,
    Settings,
    get_settings,
    reload_settings,
    settings,
)

__all__ = [
    "PROJECT_ROOT",
    "CONFIG_DIR",
    "LOGS_DIR",
    "DEFAULT_ALLOCATION_CONFIG",
    "Settings",
    "get_settings",
    "reload_settings",
    "settings",
]
