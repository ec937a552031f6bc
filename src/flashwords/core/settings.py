"""Centralized application configuration using Pydantic Settings (v2).

This module exposes a cached `load_settings()` factory that reads from:
- Real environment variables (highest precedence)
- `.env` files in the working directory: .env, then .env.local

Besides the log level and the data directory, the practice defaults live here so
that rotation distance, re-insertion limit, mastery threshold and judging
strictness can be tuned without touching the session engine.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
StrictnessName = Literal["exact", "normal", "lenient"]


def _default_data_dir() -> Path:
    """Return the per-user data directory (``$XDG_DATA_HOME/flashwords``)."""
    base = os.getenv("XDG_DATA_HOME")
    root = Path(base) if base else Path.home() / ".local" / "share"
    return root / "flashwords"


class Settings(BaseSettings):
    """Typed application configuration loaded from env and `.env` files.

    Attributes
    ----------
    log_level : LogLevelName
        Global log level string; maps from `LOG_LEVEL`.
    data_dir : Path
        Directory holding the persisted store; maps from `FLASHWORDS_DATA_DIR`.
    rotation_distance : int
        How many pool slots ahead a missed term is re-inserted.
    max_reinsertions : int
        Upper bound on re-insertions of a single term within one session.
    mastery_threshold : int
        Correct answers in a row (within a session) before a term is done.
    strictness : StrictnessName
        Default judging policy for typed answers.
    """

    log_level: LogLevelName = Field(default="WARNING", alias="LOG_LEVEL")
    data_dir: Path = Field(default_factory=_default_data_dir, alias="FLASHWORDS_DATA_DIR")

    rotation_distance: int = Field(default=3, ge=1, alias="FLASHWORDS_ROTATION_DISTANCE")
    max_reinsertions: int = Field(default=3, ge=0, alias="FLASHWORDS_MAX_REINSERTIONS")
    mastery_threshold: int = Field(default=1, ge=1, alias="FLASHWORDS_MASTERY_THRESHOLD")
    strictness: StrictnessName = Field(default="normal", alias="FLASHWORDS_STRICTNESS")

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def store_path(self) -> Path:
        """Default location of the persisted word store."""
        return self.data_dir / "store.json"

    def log_level_numeric(self) -> int:
        """Return the numeric logging level corresponding to `self.log_level`."""
        return getattr(logging, self.log_level, logging.WARNING)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Create and cache a `Settings` instance.

    We keep this behind an LRU cache so tests can force a rebuild via
    `load_settings.cache_clear()` after mutating `os.environ`.
    """
    return Settings()


def get_logger(name: str = "flashwords") -> logging.Logger:
    """Return a process-global logger configured to the current `LOG_LEVEL`."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(load_settings().log_level_numeric())
    logger.propagate = False
    return logger
