"""Centralized configuration management for the paystub extractor.

This module provides a Pydantic Settings-based configuration system that
consolidates OCR, text acquisition, batch and logging settings with
environment variable integration, type validation, and clear error handling.
"""

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class OCRConfig(BaseModel):
    """Optical character recognition settings."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(default=True, description="Run OCR on rasterized pages")
    languages: tuple[str, ...] = Field(
        default=("eng",), description="Tesseract language codes"
    )
    dpi: int = Field(
        default=300, ge=72, le=1200, description="Rasterization resolution"
    )
    page_seg_mode: int = Field(
        default=3, ge=0, le=13, description="Tesseract page segmentation mode"
    )

    @field_validator("languages", mode="before")
    @classmethod
    def split_languages(cls, v: Any) -> Any:
        """Accept 'eng+spa' or 'eng,spa' strings from the environment."""
        if isinstance(v, str):
            parts = [p.strip() for p in v.replace("+", ",").split(",")]
            return tuple(p for p in parts if p)
        return v

    @field_validator("languages")
    @classmethod
    def validate_languages(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Ensure at least one OCR language is configured."""
        if not v:
            raise ValueError("At least one OCR language is required")
        return v


class AcquisitionConfig(BaseModel):
    """Text acquisition strategy thresholds."""

    model_config = ConfigDict(frozen=True)

    min_text_length: int = Field(
        default=50,
        ge=0,
        description="Native text shorter than this triggers the pdftotext fallback",
    )
    ocr_skip_min_chars: int = Field(
        default=100,
        ge=0,
        description="Native text must be longer than this to consider skipping OCR",
    )
    ocr_skip_confidence: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Native-only confidence above which OCR is skipped",
    )
    temp_dir: Path | None = Field(
        default=None, description="Directory for temporary page images"
    )


class BatchConfig(BaseModel):
    """Batch extraction limits."""

    model_config = ConfigDict(frozen=True)

    max_documents: int = Field(
        default=10, ge=1, le=100, description="Maximum documents per batch"
    )
    max_workers: int = Field(
        default=1, ge=1, le=32, description="Documents processed concurrently"
    )


class LoggingConfig(BaseModel):
    """Logging configuration settings."""

    model_config = ConfigDict(frozen=True)

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    log_to_file: bool = Field(default=False, description="Enable file logging")
    log_file_path: Path = Field(
        default=Path("logs/paystub_extractor.log"), description="Path to log file"
    )
    max_file_size_mb: int = Field(
        default=50, ge=1, le=1000, description="Maximum log file size in MB"
    )
    backup_count: int = Field(
        default=5, ge=1, le=50, description="Number of log file backups to keep"
    )


class PaystubSettings(BaseSettings):
    """Main application settings with environment variable integration.

    Environment variables are loaded with the PAYSTUB_ prefix.
    For nested configs, use double underscores: PAYSTUB_OCR__ENABLED=false
    """

    ocr: OCRConfig = Field(default_factory=OCRConfig)
    acquisition: AcquisitionConfig = Field(default_factory=AcquisitionConfig)
    batch: BatchConfig = Field(default_factory=BatchConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    debug: bool = Field(
        default=False, description="Log at DEBUG level, like the --verbose flag"
    )

    def __init__(self, **kwargs: Any):
        """Initialize settings with legacy environment variable overrides.

        Args:
            **kwargs: Additional configuration overrides
        """
        # Handle legacy ENABLE_OCR environment variable
        if "ocr" not in kwargs:
            enable_ocr = os.getenv("ENABLE_OCR")
            if enable_ocr is not None and not os.getenv("PAYSTUB_OCR__ENABLED"):
                kwargs["ocr"] = OCRConfig(
                    enabled=enable_ocr.strip().lower() in ("1", "true", "yes", "on")
                )

        super().__init__(**kwargs)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PAYSTUB_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",  # Allow extra env vars that don't match our schema
        frozen=True,
    )


_settings: PaystubSettings | None = None


def get_settings() -> PaystubSettings:
    """Get the process-wide settings instance.

    Settings are loaded once and cached.

    Returns:
        PaystubSettings: The configuration instance

    Raises:
        ValueError: If configuration is invalid
    """
    global _settings

    if _settings is not None:
        return _settings

    try:
        _settings = PaystubSettings()
    except Exception as e:
        raise ValueError(f"Configuration error: {e}") from e

    return _settings


def reload_settings() -> PaystubSettings:
    """Reload settings from environment variables.

    Returns:
        PaystubSettings: The reloaded configuration instance
    """
    clear_settings_cache()
    return get_settings()


def clear_settings_cache() -> None:
    """Drop the cached settings so the next access reloads them."""
    global _settings
    _settings = None
