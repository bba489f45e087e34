"""Configuration management for the sheetgrid import engine.

This module provides centralized configuration using pydantic-settings.
All configuration options can be set via environment variables with the
SHEETGRID_ prefix, or via a .env file in the project root.

Environment Variables:
    SHEETGRID_MAX_FILE_SIZE_MB: Maximum upload size in MB (default: 10)
    SHEETGRID_MAX_CELL_COUNT: Maximum cells a grid may hold (default: 2000000)
    SHEETGRID_FLOOR_ROWS: Minimum grid row count (default: 200)
    SHEETGRID_FLOOR_COLS: Minimum grid column count (default: 50)
    SHEETGRID_GRID_MARGIN: Empty rows/columns appended past the used range
        (default: 10)
    SHEETGRID_FILTER_WHITE_BACKGROUND: Drop pure-white backgrounds when
        assembling (default: true)
    SHEETGRID_LOG_LEVEL: Logging level (default: INFO)
    SHEETGRID_DEBUG: Enable debug mode (default: false)
    SHEETGRID_CORS_ORIGINS: Comma-separated CORS origins (default: *)
    SHEETGRID_SERVER_HOST: Server bind host (default: 0.0.0.0)
    SHEETGRID_SERVER_PORT: Server bind port (default: 8000)
"""

import logging
from typing import Any

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Example .env file:
        SHEETGRID_FLOOR_ROWS=100
        SHEETGRID_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="SHEETGRID_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # =========================================================================
    # Upload Settings
    # =========================================================================

    max_file_size_mb: int = 10
    """Maximum upload size in megabytes."""

    # =========================================================================
    # Grid Sizing Settings
    # =========================================================================

    max_cell_count: int = 2_000_000
    """Upper bound on worksheet and grid cell counts (memory guard)."""

    floor_rows: int = 200
    """Minimum number of rows in an assembled grid."""

    floor_cols: int = 50
    """Minimum number of columns in an assembled grid."""

    grid_margin: int = 10
    """Headroom rows/columns appended past the used range."""

    # =========================================================================
    # Styling Settings
    # =========================================================================

    filter_white_background: bool = True
    """Drop pure-white backgrounds so they don't override the widget default."""

    # =========================================================================
    # Logging Settings
    # =========================================================================

    log_level: str = "INFO"
    """Logging level: DEBUG, INFO, WARNING, ERROR, or CRITICAL."""

    debug: bool = False
    """Enable debug mode with additional logging and error details."""

    # =========================================================================
    # Server Settings
    # =========================================================================

    cors_origins: str = "*"
    """Comma-separated list of allowed CORS origins, or * for all."""

    server_host: str = "0.0.0.0"
    """Host address for the server to bind to."""

    server_port: int = 8000
    """Port for the server to listen on."""

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(valid_levels)}"
            )
        return upper_v

    @field_validator("max_file_size_mb")
    @classmethod
    def validate_file_size(cls, v: int) -> int:
        """Validate file size is positive and reasonable."""
        if not 1 <= v <= 500:
            raise ValueError(f"max_file_size_mb must be between 1 and 500, got {v}")
        return v

    @field_validator("floor_rows", "floor_cols", "max_cell_count")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate grid sizes are at least one cell."""
        if v < 1:
            raise ValueError(f"grid sizes must be at least 1, got {v}")
        return v

    @field_validator("grid_margin")
    @classmethod
    def validate_margin(cls, v: int) -> int:
        """Validate margin is not negative."""
        if v < 0:
            raise ValueError(f"grid_margin must not be negative, got {v}")
        return v

    @field_validator("server_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port is in valid range."""
        if not 1 <= v <= 65535:
            raise ValueError(f"server_port must be between 1 and 65535, got {v}")
        return v

    @model_validator(mode="after")
    def validate_floor_fits_cell_budget(self) -> "Settings":
        """Validate an empty grid fits within the maximum cell count."""
        if self.floor_rows * self.floor_cols > self.max_cell_count:
            raise ValueError(
                f"floor grid ({self.floor_rows} x {self.floor_cols}) exceeds "
                f"max_cell_count ({self.max_cell_count})"
            )
        return self

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @property
    def log_level_int(self) -> int:
        """Get log level as integer for logging module."""
        level: int = getattr(logging, self.log_level)
        return level

    def to_safe_dict(self) -> dict[str, Any]:
        """Convert settings to a dictionary suitable for logging."""
        return {
            "max_file_size_mb": self.max_file_size_mb,
            "max_cell_count": self.max_cell_count,
            "floor_rows": self.floor_rows,
            "floor_cols": self.floor_cols,
            "grid_margin": self.grid_margin,
            "filter_white_background": self.filter_white_background,
            "log_level": self.log_level,
            "debug": self.debug,
            "cors_origins": self.cors_origins,
            "server_host": self.server_host,
            "server_port": self.server_port,
        }


def validate_settings_on_startup(s: Settings) -> None:
    """Validate settings on application startup.

    Emits warnings for configurations that are valid but risky.

    Args:
        s: Settings instance to validate.
    """
    logger = logging.getLogger(__name__)

    if s.cors_origins == "*" and not s.debug:
        logger.warning(
            "CORS is configured to allow all origins (*). "
            "Consider restricting this in production."
        )

    if s.max_cell_count > 10_000_000:
        logger.warning(
            f"max_cell_count={s.max_cell_count} allows very large grids; "
            "imports of adversarial files may exhaust memory."
        )

    logger.info(
        f"Configuration loaded: log_level={s.log_level}, debug={s.debug}, "
        f"max_file_size_mb={s.max_file_size_mb}, "
        f"floor={s.floor_rows}x{s.floor_cols}, margin={s.grid_margin}"
    )


# Create the global settings instance
settings = Settings()
