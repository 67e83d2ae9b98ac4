"""Configuration management for pid-port."""

import logging
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

SUPPORTED_PLATFORMS = ("darwin", "linux", "win32")


class Settings(BaseSettings):
    """Runtime settings, read from PID_PORT_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PID_PORT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    debug: bool = False
    json_logs: bool = False

    # Command execution
    command_timeout: float = 10.0  # seconds per netstat/ss/lsof run
    privilege_fallback: bool = True  # retry hidden PIDs with lsof

    # Force a platform adapter instead of detecting from sys.platform
    platform: str | None = None

    @field_validator("command_timeout")
    @classmethod
    def validate_command_timeout(cls, v: float) -> float:
        """Reject non-positive timeouts."""
        if v <= 0:
            raise ValueError("command_timeout must be greater than 0")
        return v

    @field_validator("platform")
    @classmethod
    def validate_platform(cls, v: str | None) -> str | None:
        """Only accept platforms that have an adapter."""
        if v is None or v == "":
            return None
        v = v.strip().lower()
        if v not in SUPPORTED_PLATFORMS:
            raise ValueError(f"platform must be one of {', '.join(SUPPORTED_PLATFORMS)}")
        return v


settings = Settings()


def get_config_dict() -> dict[str, Any]:
    """Get config as dict for diagnostics output."""
    return {
        "debug": settings.debug,
        "json_logs": settings.json_logs,
        "command_timeout": settings.command_timeout,
        "privilege_fallback": settings.privilege_fallback,
        "platform": settings.platform,
    }
