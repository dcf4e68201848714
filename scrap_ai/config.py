"""Application configuration settings.

This module provides centralized configuration management using environment
variables with sensible defaults.
"""

import os
from dataclasses import dataclass

DEFAULT_API_URL = "https://yfcb5ugk4m.execute-api.af-south-1.amazonaws.com/prod"
DEFAULT_MAX_AGE_MS = 5 * 60 * 1000


def _get_int_env(name: str, default: int) -> int:
    """Get an integer value from environment variable.

    Args:
        name: Environment variable name.
        default: Default value if not set or not an integer.

    Returns:
        Integer value from environment.
    """
    value = os.getenv(name, "").strip()
    try:
        return int(value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """Get a float value from environment variable."""
    value = os.getenv(name, "").strip()
    try:
        return float(value)
    except ValueError:
        return default


@dataclass
class Settings:
    """Application settings loaded from environment variables.

    Attributes:
        SCRAP_API_KEY: API key for the scrape service; also the webhook secret.
        SCRAP_API_URL: Scrape job submission endpoint.
        SCRAP_WEBHOOK_MAX_AGE_MS: Replay window for webhook timestamps.
        SCRAP_REQUEST_TIMEOUT: Outbound HTTP timeout in seconds.
        LOG_LEVEL: Logging level.
    """

    # Credentials
    SCRAP_API_KEY: str | None = None

    # Scrape service
    SCRAP_API_URL: str = DEFAULT_API_URL
    SCRAP_REQUEST_TIMEOUT: float = 30.0

    # Webhooks
    SCRAP_WEBHOOK_MAX_AGE_MS: int = DEFAULT_MAX_AGE_MS

    # Logging
    LOG_LEVEL: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Create settings from environment variables.

        Returns:
            Settings instance populated from environment.
        """
        return cls(
            SCRAP_API_KEY=os.getenv("SCRAP_API_KEY") or None,
            SCRAP_API_URL=os.getenv("SCRAP_API_URL") or DEFAULT_API_URL,
            SCRAP_REQUEST_TIMEOUT=_get_float_env("SCRAP_REQUEST_TIMEOUT", 30.0),
            SCRAP_WEBHOOK_MAX_AGE_MS=_get_int_env(
                "SCRAP_WEBHOOK_MAX_AGE_MS", DEFAULT_MAX_AGE_MS
            ),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
        )


# Global settings instance
settings = Settings.from_env()
