"""Logging configuration management for the paystub extractor.

This module provides centralized logging configuration shared by the CLI and
library callers. Console output goes to stderr so JSON written to stdout by
the CLI stays machine-readable.
"""

import logging
import os
import sys
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

# PDF and imaging libraries log every parsed object at DEBUG
NOISY_LOGGERS: tuple[str, ...] = ("pdfminer", "pdfplumber", "PIL", "pytesseract")


@dataclass
class LoggingConfig:
    """Configuration settings for application logging."""

    level: str = "INFO"
    format_string: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    cli_format_string: str = "%(message)s"
    log_to_file: bool = False
    log_file_path: Path = Path("logs/paystub_extractor.log")
    max_file_size_mb: int = 50
    backup_count: int = 5
    force_reconfigure: bool = False
    quiet_loggers: tuple[str, ...] = NOISY_LOGGERS

    @classmethod
    def from_environment(cls) -> "LoggingConfig":
        """Create logging configuration from the environment.

        Starts from the ``PAYSTUB_LOGGING__*`` settings, with ``PAYSTUB_DEBUG``
        raising the level to DEBUG. The plain ``LOG_LEVEL``, ``LOG_TO_FILE``,
        ``LOG_FILE_PATH``, ``LOG_MAX_FILE_SIZE_MB`` and ``LOG_BACKUP_COUNT``
        variables override them.

        Returns:
            LoggingConfig: Configuration loaded from environment
        """
        from paystub_extractor.config import get_settings

        app_settings = get_settings()
        settings = app_settings.logging
        default_level = "DEBUG" if app_settings.debug else settings.level
        log_to_file = os.getenv("LOG_TO_FILE")
        return cls(
            level=os.getenv("LOG_LEVEL", default_level).upper(),
            log_to_file=(
                settings.log_to_file
                if log_to_file is None
                else log_to_file.lower() == "true"
            ),
            log_file_path=Path(os.getenv("LOG_FILE_PATH") or settings.log_file_path),
            max_file_size_mb=_int_env("LOG_MAX_FILE_SIZE_MB", settings.max_file_size_mb),
            backup_count=_int_env("LOG_BACKUP_COUNT", settings.backup_count),
        )


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    return default if value is None else int(value)


def _console_handler(config: LoggingConfig, cli_mode: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    fmt = config.cli_format_string if cli_mode else config.format_string
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _file_handler(config: LoggingConfig) -> logging.Handler:
    config.log_file_path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        config.log_file_path,
        maxBytes=config.max_file_size_mb * 1024 * 1024,
        backupCount=config.backup_count,
    )
    handler.setFormatter(logging.Formatter(config.format_string))
    return handler


def setup_logging(
    config: LoggingConfig | None = None,
    cli_mode: bool = False,
    verbose: bool = False,
) -> None:
    """Set up centralized logging configuration for the application.

    Args:
        config: Optional logging configuration. If None, loads from environment.
        cli_mode: If True, console lines carry only the message
        verbose: If True, enable DEBUG level logging (overrides config level)
    """
    if config is None:
        config = LoggingConfig.from_environment()

    level = logging.DEBUG if verbose else getattr(logging, config.level)

    handlers = [_console_handler(config, cli_mode)]
    if config.log_to_file:
        handlers.append(_file_handler(config))

    logging.basicConfig(level=level, handlers=handlers, force=config.force_reconfigure)

    for name in config.quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_log_config_summary() -> dict[str, Any]:
    """Get a summary of current logging configuration.

    Returns:
        dict: Summary of logging configuration settings
    """
    config = LoggingConfig.from_environment()
    root_logger = logging.getLogger()

    return {
        "level": logging.getLevelName(root_logger.level),
        "handlers": [type(h).__name__ for h in root_logger.handlers],
        "log_to_file": config.log_to_file,
        "log_file_path": str(config.log_file_path),
        "format_string": config.format_string,
    }
