"""
Logging configuration using loguru.

Modules log through ``from loguru import logger``; this module only installs
the handlers (console, rotating file, error file) once at program start.
"""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

from config.settings import LOGS_DIR, get_settings

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def setup_logging(
    level: str | None = None,
    log_file: Path | str | None = None,
    rotation: str | None = None,
    retention: str | None = None,
    serialize: bool | None = None,
    console: bool = True,
    error_log: bool = True,
) -> None:
    """
    Configure the global logger.

    Arguments left as None take their value from ``settings.logging``.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path to log file (None to disable file logging)
        rotation: When to rotate the log file
        retention: How long to keep old log files
        serialize: Whether to output JSON logs
        console: Whether to log to console
        error_log: Whether to keep a separate error-only log
    """
    cfg = get_settings().logging
    level = level or cfg.level
    rotation = rotation or cfg.rotation
    retention = retention or cfg.retention
    serialize = cfg.serialize if serialize is None else serialize

    # Remove default handler
    logger.remove()

    if console:
        logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, colorize=True)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            str(log_path),
            level="DEBUG",
            format=cfg.format,
            rotation=rotation,
            retention=retention,
            compression="gz",
            serialize=serialize,
        )

    if error_log:
        error_path = LOGS_DIR / "errors.log"
        error_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(error_path),
            level="ERROR",
            format=cfg.format,
            rotation="5 MB",
            retention="90 days",
            compression="gz",
        )
