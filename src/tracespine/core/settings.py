"""Process-level settings for tracespine.

These are the knobs of the tool itself (log level, output format), read from
``TRACESPINE_*`` environment variables and an optional ``.env`` file. They are
distinct from project settings declared in ``[settings]`` tables of ``.rsk``
files, which are modelled by :class:`tracespine.core.models.Settings`.

Examples:
    >>> from tracespine.core.settings import get_settings
    >>> get_settings().log_level
    'WARNING'

Tags:
    settings, configuration, pydantic, environment, tracespine
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class TraceBaseSettings(BaseSettings):
    """Settings read from the environment.

    Fields
    ──────
    log_level : Structlog log level
    json_logs : JSON log output; ``None`` auto-detects from the terminal
    color     : Colored console output
    """

    model_config = SettingsConfigDict(
        env_prefix="TRACESPINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "WARNING"
    json_logs: bool | None = Field(default=None, description="Force JSON (true) or console (false) logs")
    color: bool = True

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return level


_settings: TraceBaseSettings | None = None


def get_settings() -> TraceBaseSettings:
    """Get or create the process-wide settings."""
    global _settings
    if _settings is None:
        _settings = TraceBaseSettings()
    return _settings


def reset_settings() -> None:
    """Reset the cached settings (for testing)."""
    global _settings
    _settings = None
