"""Configuration management for fetchkit.

Centralizes all environment variable access for better testability and maintainability.
"""

import os
from typing import Optional


DEFAULT_BATCH_LIMIT = 8


class Config:
    """Library configuration loaded from environment variables."""

    # HTTP transport
    @staticmethod
    def base_url() -> Optional[str]:
        """Get the default base URL for HTTP requests."""
        return os.getenv("FETCHKIT_BASE_URL") or None

    @staticmethod
    def timeout() -> Optional[float]:
        """Get the default request timeout in seconds (None = no timeout)."""
        raw = os.getenv("FETCHKIT_TIMEOUT")
        if not raw:
            return None
        try:
            value = float(raw)
        except ValueError:
            return None
        return value if value > 0 else None

    # Batch engine
    @staticmethod
    def batch_limit() -> int:
        """Get the default concurrency limit for batch runs."""
        raw = os.getenv("FETCHKIT_BATCH_LIMIT")
        if not raw:
            return DEFAULT_BATCH_LIMIT
        try:
            value = int(raw)
        except ValueError:
            return DEFAULT_BATCH_LIMIT
        return value if value > 0 else DEFAULT_BATCH_LIMIT

    # Logging
    @staticmethod
    def log_level() -> str:
        """Get log level name (DEBUG, INFO, WARNING, ERROR)."""
        return os.getenv("FETCHKIT_LOG_LEVEL", "INFO").upper()

    @staticmethod
    def log_format() -> str:
        """Get log renderer: 'json' (default) or 'console'."""
        return os.getenv("FETCHKIT_LOG_FORMAT", "json").lower()

    # Helper methods
    @staticmethod
    def get_invalid_config() -> list[str]:
        """Get list of environment variables set to values that will be ignored."""
        invalid = []

        raw_timeout = os.getenv("FETCHKIT_TIMEOUT")
        if raw_timeout and Config.timeout() is None:
            invalid.append("FETCHKIT_TIMEOUT")

        raw_limit = os.getenv("FETCHKIT_BATCH_LIMIT")
        if raw_limit:
            try:
                if int(raw_limit) <= 0:
                    invalid.append("FETCHKIT_BATCH_LIMIT")
            except ValueError:
                invalid.append("FETCHKIT_BATCH_LIMIT")

        if Config.log_format() not in ("json", "console"):
            invalid.append("FETCHKIT_LOG_FORMAT")

        return invalid


# Singleton instance for easy access
config = Config()
