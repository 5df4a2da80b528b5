"""
Engine configuration and settings.

Loads environment variables (prefix RULE_ENGINE_) and provides a typed
configuration object.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class EngineSettings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_prefix="RULE_ENGINE_", extra="ignore")

    # Simulation
    max_steps: int = Field(
        default=1000, ge=0, description="Step budget for a simulation run"
    )
    strategy: Literal["random", "first"] = Field(
        default="random",
        description="Selection strategy: random (uniform) or first (deterministic)",
    )
    # Seeds the random strategy for reproducible runs
    seed: Optional[int] = Field(default=None, description="Random strategy seed")

    # Logging
    log_level: str = Field(default="WARNING", description="Root log level for the CLI")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {value}")
        return level


@lru_cache
def get_settings() -> EngineSettings:
    """Get cached settings instance."""
    return EngineSettings()
