"""Application configuration using Pydantic settings."""

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mazetool.core.grid import (
    MAZE_DIMENSION_DEFAULT,
    MAZE_DIMENSION_MAX,
    MAZE_DIMENSION_MIN,
)

# Directory the tool is run from; the maze file lives here by default.
BASE_DIR = Path.cwd()

LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="MAZETOOL_",
        env_file=os.path.join(BASE_DIR, ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Mazetool"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Maze generation
    default_width: int = MAZE_DIMENSION_DEFAULT
    default_height: int = MAZE_DIMENSION_DEFAULT
    seed: Optional[int] = None

    # Persistence
    maze_file: Path = Path("maze.txt")
    save_generated: bool = True

    # Control
    lock_timeout_seconds: float = 30.0

    # Windowed interface
    gui_cell_size: int = 12
    gui_poll_interval_ms: int = 50

    @field_validator("default_width", "default_height")
    @classmethod
    def validate_dimension(cls, v: int) -> int:
        """Keep default dimensions inside the supported range."""
        if not MAZE_DIMENSION_MIN <= v <= MAZE_DIMENSION_MAX:
            raise ValueError(
                f"Maze dimension must be between {MAZE_DIMENSION_MIN} and {MAZE_DIMENSION_MAX}"
            )
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the log level name."""
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("lock_timeout_seconds")
    @classmethod
    def validate_lock_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("lock_timeout_seconds must be positive")
        return v

    @property
    def effective_log_level(self) -> str:
        """Log level actually applied, DEBUG when debug mode is on."""
        return "DEBUG" if self.debug else self.log_level


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
